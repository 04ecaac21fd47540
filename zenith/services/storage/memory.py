"""
In-Memory Snapshot Storage

A dict of key -> serialized blob. Blobs are stored as JSON text, so a
round trip exercises the same serialization as durable storage.
"""

from typing import Optional

from pydantic import ValidationError

from zenith.config import get_settings
from zenith.models.entities import Snapshot
from zenith.services.storage.interface import (
    SnapshotNotFoundError,
    SnapshotStorageInterface,
    StorageError,
)


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Key-value blob store held in a dict."""

    def __init__(
        self,
        blobs: Optional[dict[str, str]] = None,
        key: Optional[str] = None,
    ):
        self._blobs = blobs if blobs is not None else {}
        self._key = key or get_settings().storage.snapshot_key

    @property
    def blobs(self) -> dict[str, str]:
        return self._blobs

    def load(self) -> Snapshot:
        blob = self._blobs.get(self._key)
        if blob is None:
            raise SnapshotNotFoundError(f"No snapshot stored under {self._key}")
        try:
            return Snapshot.from_json(blob)
        except ValidationError as e:
            raise StorageError(f"Stored snapshot is corrupt: {e.error_count()} error(s)")

    def save(self, snapshot: Snapshot) -> bool:
        self._blobs[self._key] = snapshot.to_json()
        return True
