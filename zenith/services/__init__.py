"""Services package."""

from zenith.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    PersistenceError,
    SnapshotMirror,
    SnapshotNotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from zenith.services.suggestion import (
    GeminiCategorySuggester,
    ServiceUnavailableError,
)

__all__ = [
    # Storage services
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "PersistenceError",
    "SnapshotMirror",
    "SnapshotNotFoundError",
    "SnapshotStorageInterface",
    "StorageError",
    # Suggestion services
    "GeminiCategorySuggester",
    "ServiceUnavailableError",
]
