"""
Abstract Snapshot Storage Interface

DESIGN DECISION: The store never talks to storage directly.
It only produces and consumes Snapshots. Storage is a generic durable
key-value blob store holding the full serialized snapshot, so it can be
swapped (local file, browser storage bridge, in-memory for tests)
without touching the store.
"""

from abc import ABC, abstractmethod

from zenith.models.entities import Snapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot persistence.
    """

    @abstractmethod
    def load(self) -> Snapshot:
        """
        Load the last saved snapshot.

        Returns:
            The stored snapshot

        Raises:
            SnapshotNotFoundError: If nothing has been saved yet
            StorageError: If the stored blob cannot be read or parsed
        """
        pass

    @abstractmethod
    def save(self, snapshot: Snapshot) -> bool:
        """
        Replace the stored snapshot.

        Returns:
            True if saved successfully

        Raises:
            PersistenceError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotNotFoundError(StorageError):
    """No snapshot has been saved under the configured key."""
    pass


class PersistenceError(StorageError):
    """Writing to durable storage failed."""
    pass
