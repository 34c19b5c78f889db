"""Storage backends for persisting cache entries.

This module provides:
- StorageBackend: Abstract base class every backend implements
- SQLiteStorage: Single-file SQLite database
- DirectoryStorage: One directory per key under a storage root
- RAMStorage: In-process dictionary
- create_storage: Factory selecting a backend by StorageKind
"""

from persistent_cache.storage.base import StorageBackend
from persistent_cache.storage.directory_storage import DirectoryStorage
from persistent_cache.storage.factory import create_storage, parse_storage_kind
from persistent_cache.storage.memory_storage import RAMStorage
from persistent_cache.storage.sqlite_storage import SQLiteStorage

__all__ = [
    "DirectoryStorage",
    "RAMStorage",
    "SQLiteStorage",
    "StorageBackend",
    "create_storage",
    "parse_storage_kind",
]
