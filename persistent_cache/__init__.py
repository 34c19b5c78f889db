"""persistent_cache - a key-value cache with a freshness window.

Entries are stored through one of three interchangeable backends (SQLite
file, directory tree, in-process dict) and evicted lazily when a read finds
them older than the configured freshness window.
"""

from persistent_cache.cache import Cache
from persistent_cache.consts import FRESH
from persistent_cache.exceptions import (
    InvalidArgumentError,
    StorageBackendError,
    StorageBusyError,
    StorageError,
    StorageUnavailableError,
)
from persistent_cache.models import CacheConfig, StorageKind, StoredEntry
from persistent_cache.storage import (
    DirectoryStorage,
    RAMStorage,
    SQLiteStorage,
    StorageBackend,
    create_storage,
)

__version__ = "0.1.0"

__all__ = [
    "FRESH",
    "Cache",
    "CacheConfig",
    "DirectoryStorage",
    "InvalidArgumentError",
    "RAMStorage",
    "SQLiteStorage",
    "StorageBackend",
    "StorageBackendError",
    "StorageBusyError",
    "StorageError",
    "StorageKind",
    "StorageUnavailableError",
    "StoredEntry",
    "create_storage",
]
