"""Construction of storage backends from a StorageKind."""

from pathlib import Path

from persistent_cache.exceptions import InvalidArgumentError
from persistent_cache.models.model_entry import StorageKind
from persistent_cache.storage.base import StorageBackend
from persistent_cache.storage.directory_storage import DirectoryStorage
from persistent_cache.storage.memory_storage import RAMStorage
from persistent_cache.storage.sqlite_storage import SQLiteStorage


def parse_storage_kind(storage: StorageKind | str) -> StorageKind:
    """Turn a kind name into a StorageKind.

    Raises:
        InvalidArgumentError: If the name is not one of sqlite, directory, ram.
    """
    if isinstance(storage, StorageKind):
        return storage
    try:
        return StorageKind(storage)
    except ValueError as e:
        valid = ", ".join(kind.value for kind in StorageKind)
        raise InvalidArgumentError(f"Unsupported storage type '{storage}'. Must be one of: {valid}") from e


def create_storage(storage: StorageKind | str, storage_details: str | Path) -> StorageBackend:
    """Build the backend of the given kind for a storage location."""
    kind = parse_storage_kind(storage)
    if kind is StorageKind.SQLITE:
        return SQLiteStorage(storage_details)
    if kind is StorageKind.DIRECTORY:
        return DirectoryStorage(storage_details)
    return RAMStorage(str(storage_details))
