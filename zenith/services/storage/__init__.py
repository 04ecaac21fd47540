"""
Storage Services Package

Provides the abstract snapshot storage interface, concrete
implementations, and the best-effort mirror that keeps storage
in step with the store.
"""

from zenith.services.storage.interface import (
    PersistenceError,
    SnapshotNotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from zenith.services.storage.json_file import JsonFileSnapshotStorage
from zenith.services.storage.memory import InMemorySnapshotStorage
from zenith.services.storage.mirror import SnapshotMirror

__all__ = [
    # Interfaces
    "SnapshotStorageInterface",
    # Exceptions
    "PersistenceError",
    "SnapshotNotFoundError",
    "StorageError",
    # Implementations
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "SnapshotMirror",
]
