"""Abstract base class for storage backends.

A backend persists (key, value, timestamp) entries and nothing more. It knows
nothing about freshness: the Cache façade reads timestamps back and decides
what is stale.
"""

from abc import ABC, abstractmethod
from collections.abc import Hashable
from datetime import datetime
from pathlib import Path
from typing import Any

from persistent_cache.exceptions import InvalidArgumentError
from persistent_cache.models.model_entry import StoredEntry


def storage_location(storage_details: str | Path | None) -> str:
    """Text form of a store location, rejecting a missing one.

    Path("") counts as missing: it normalises to the current directory.
    """
    if storage_details is None or storage_details == "":
        raise InvalidArgumentError("No storage details provided")
    if isinstance(storage_details, Path) and not storage_details.parts:
        raise InvalidArgumentError(f"Storage details {storage_details!r} name no location")
    return str(storage_details)


class StorageBackend(ABC):
    """Abstract base class for storage implementations.

    All implementations honour the same contract: saving an existing key
    replaces its entry, lookups and deletes of missing keys are not errors,
    and clear() empties the store without removing the store itself.
    """

    storage_details: str

    @abstractmethod
    def save(self, key: Hashable, value: Any, timestamp: datetime | None = None) -> None:
        """Store a value under a key.

        Args:
            key: Entry key. SQLite and directory backends only accept str/bytes.
            value: Entry payload. SQLite and directory backends only accept bytes.
            timestamp: Write time to record. None records the backend's clock
                at the moment of the write.

        Raises:
            InvalidArgumentError: If the key or value is not storable by this backend.
        """
        ...

    @abstractmethod
    def lookup(self, key: Hashable) -> StoredEntry | None:
        """Get the entry stored under a key.

        Args:
            key: Entry key.

        Returns:
            The stored value and timestamp, or None if the key has no entry.
        """
        ...

    @abstractmethod
    def delete(self, key: Hashable) -> None:
        """Remove the entry for a key. Missing keys are ignored."""
        ...

    @abstractmethod
    def keys(self) -> list[Any]:
        """List the keys currently stored.

        Returns:
            Keys in sorted order for SQLite and directory storage, insertion
            order for RAM storage. Empty list if the store is empty.
        """
        ...

    @abstractmethod
    def size(self) -> int:
        """Number of entries currently stored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry. The database file / root directory / map survives."""
        ...

    def close(self) -> None:
        """Release the handle on the physical store. No-op by default."""
        return None


def main() -> None:
    """Example demonstrating the StorageBackend interface."""
    print("StorageBackend is an abstract base class.")
    print("It defines the interface that storage implementations must follow:")
    print("  - save(key, value, timestamp) -> None")
    print("  - lookup(key) -> StoredEntry | None")
    print("  - delete(key) -> None")
    print("  - keys() -> list")
    print("  - size() -> int")
    print("  - clear() -> None")
    print("\nSee SQLiteStorage, DirectoryStorage and RAMStorage for implementations.")


if __name__ == "__main__":
    main()
