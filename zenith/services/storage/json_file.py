"""
JSON File Snapshot Storage

One JSON file per key under a data directory. This is the durable
mirror of the in-memory store when running outside a browser.

TRADEOFFS:
- The whole snapshot is rewritten on every save (fine for personal data)
- Writes go to a temporary file first and replace the target atomically,
  so a crash mid-write never leaves a truncated snapshot behind
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_none

from zenith.config import get_settings
from zenith.models.entities import Snapshot
from zenith.services.storage.interface import (
    PersistenceError,
    SnapshotNotFoundError,
    SnapshotStorageInterface,
    StorageError,
)


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    File-backed key-value blob store.

    The snapshot lives at <data_dir>/<key>.json.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        key: Optional[str] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._key = key or settings.snapshot_key

    @property
    def path(self) -> Path:
        return self._data_dir / f"{self._key}.json"

    def load(self) -> Snapshot:
        if not self.path.exists():
            raise SnapshotNotFoundError(f"No snapshot at {self.path}")
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read snapshot: {e}")
        try:
            return Snapshot.from_json(text)
        except ValidationError as e:
            raise StorageError(f"Stored snapshot is corrupt: {e.error_count()} error(s)")

    # Saves run inside every commit, so retries do not back off.
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_none(),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_blob(self, text: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, self.path)

    def save(self, snapshot: Snapshot) -> bool:
        try:
            self._write_blob(snapshot.to_json())
        except OSError as e:
            raise PersistenceError(f"Failed to save snapshot: {e}")
        return True
