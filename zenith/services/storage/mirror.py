"""
Snapshot Mirror

Keeps durable storage in step with the store, best-effort.

CRITICAL: The in-memory snapshot is always the source of truth.
A failed save is logged and forgotten: it is never raised to the
caller and never rolls the store back. Every save writes the whole
snapshot, so the next successful mutation repairs the mirror.
"""

from typing import Optional

from zenith.audit import AuditLogger
from zenith.models.audit import AuditEventBuilder, AuditEventType
from zenith.models.entities import Snapshot
from zenith.services.storage.interface import (
    SnapshotNotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from zenith.store import LedgerStore, initial_snapshot


class SnapshotMirror:
    """Bridges a LedgerStore to a SnapshotStorageInterface."""

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._last_saved_version: Optional[int] = None

    @property
    def last_saved_version(self) -> Optional[int]:
        return self._last_saved_version

    def load_or_initialize(self) -> Snapshot:
        """
        Load the stored snapshot.

        First run (nothing stored) yields an empty store with the default
        currencies. A corrupt blob is logged and treated like first run.
        """
        try:
            snapshot = self._storage.load()
        except SnapshotNotFoundError:
            self._audit.log(AuditEventBuilder.entity_changed(
                AuditEventType.SNAPSHOT_INITIALIZED, "snapshot", None,
                "No stored snapshot; starting empty", 0,
            ))
            return initial_snapshot()
        except StorageError as e:
            self._audit.log_error("snapshot_load_failed", str(e))
            return initial_snapshot()

        self._last_saved_version = snapshot.version
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.SNAPSHOT_LOADED, "snapshot", None,
            f"Loaded snapshot with {len(snapshot.users)} users", snapshot.version,
        ))
        return snapshot

    def save(self, snapshot: Snapshot) -> bool:
        """Save a snapshot. Never raises."""
        try:
            self._storage.save(snapshot)
        except Exception as e:
            # Log failure but don't raise
            self._audit.log_save_failed(snapshot.version, str(e))
            return False
        self._last_saved_version = snapshot.version
        return True

    def attach(self, store: LedgerStore) -> None:
        """Save every snapshot the store commits from now on."""
        store.subscribe(self.save)
