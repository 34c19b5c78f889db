"""Cache façade with a freshness window over a storage backend.

The backend only stores (value, timestamp) pairs. This module decides what
is fresh: a read that finds an entry older than the freshness window deletes
it and reports a miss. There is no background sweep, so stale entries stay
in the backend (and in keys()/size()) until something reads them.
"""

import logging
from collections.abc import Callable, Hashable, Iterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from persistent_cache.consts import FRESH
from persistent_cache.exceptions import InvalidArgumentError
from persistent_cache.models.model_config import CacheConfig
from persistent_cache.models.model_entry import StorageKind, StoredEntry
from persistent_cache.storage.base import StorageBackend, storage_location
from persistent_cache.storage.factory import create_storage, parse_storage_kind

logger = logging.getLogger(__name__)


class Cache:
    """Persistent key-value cache with lazy expiry.

    Attributes:
        storage_details: Location of the store (database file, root directory
            or RAM label).
        fresh: Freshness window in seconds (or a timedelta). None disables expiry.
        encoding: Codec applied to str keys before they reach the backend.
            Keys stored under one encoding are not found under another.
        storage: The backend instance, owned by this cache.
    """

    def __init__(
        self,
        storage_details: str | Path,
        fresh: float | timedelta | None = FRESH,
        storage: StorageKind | str = StorageKind.SQLITE,
        encoding: str | None = None,
    ):
        """Initialize Cache.

        Args:
            storage_details: Where the backend keeps its data.
            fresh: Freshness window. Defaults to FRESH; None never expires.
            storage: Backend kind (sqlite, directory or ram).
            encoding: Optional codec for str keys, e.g. "iso-8859-1".

        Raises:
            InvalidArgumentError: If storage_details is empty or the kind is unknown.
            StorageUnavailableError: If the backend cannot open its store.
        """
        location = storage_location(storage_details)
        kind = parse_storage_kind(storage)
        self.storage_details = location
        self.fresh = fresh
        self.encoding = encoding
        self.storage: StorageBackend = create_storage(kind, storage_details)

    @classmethod
    def from_config(cls, config: CacheConfig) -> "Cache":
        """Build a cache from a validated CacheConfig."""
        return cls(
            config.storage_details,
            fresh=config.fresh,
            storage=config.storage,
            encoding=config.encoding,
        )

    def _encode_key(self, key: Hashable) -> Hashable:
        """Apply the configured encoding to str keys; other keys pass through."""
        if self.encoding is None or not isinstance(key, str):
            return key
        try:
            return key.encode(self.encoding)
        except LookupError as e:
            raise InvalidArgumentError(f"Unknown key encoding '{self.encoding}'") from e
        except UnicodeEncodeError as e:
            raise InvalidArgumentError(f"Key {key!r} cannot be encoded as {self.encoding}") from e

    def freshness_seconds(self) -> float | None:
        """Freshness window in seconds, or None if entries never expire."""
        if isinstance(self.fresh, timedelta):
            return self.fresh.total_seconds()
        return self.fresh

    def is_stale(self, entry: StoredEntry) -> bool:
        """Whether entry is older than the freshness window."""
        window = self.freshness_seconds()
        return window is not None and entry.age_seconds() > window

    def _fetch(self, stored_key: Hashable) -> Any | None:
        """Freshness-checked read of an already-encoded key."""
        entry = self.storage.lookup(stored_key)
        if entry is None or entry.value is None:
            return None

        if self.is_stale(entry):
            logger.debug(f"Evicting stale key={stored_key!r} (written {entry.timestamp.isoformat()})")
            self.storage.delete(stored_key)
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, timestamp: datetime | None = None) -> None:
        """Store value under key, replacing any existing entry.

        A value of None deletes the key instead. timestamp overrides the write
        time recorded by the backend.
        """
        if value is None:
            self.delete(key)
            return
        stored_key = self._encode_key(key)
        self.storage.delete(stored_key)
        self.storage.save(stored_key, value, timestamp)

    def get(self, key: Hashable) -> Any | None:
        """Value for key, or None if missing or older than the freshness window.

        Stale entries are deleted from the backend as a side effect.
        """
        return self._fetch(self._encode_key(key))

    def delete(self, key: Hashable) -> None:
        """Remove key. Missing keys are ignored."""
        self.storage.delete(self._encode_key(key))

    def timestamp_of(self, key: Hashable) -> datetime | None:
        """When key was written, or None. Never evicts."""
        entry = self.storage.lookup(self._encode_key(key))
        if entry is None:
            return None
        return entry.timestamp

    def key_present(self, key: Hashable) -> Hashable | None:
        """Return key if the backend holds an entry for it, fresh or not.

        The check goes through the backend's own key mapping, so it agrees
        with get() even where keys() reports keys in another form.
        """
        if self.storage.lookup(self._encode_key(key)) is None:
            return None
        return key

    def keys(self) -> list[Any]:
        """Keys held by the backend, including stale ones not yet evicted."""
        return self.storage.keys()

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Yield (key, value) for every fresh entry, evicting stale ones on the way."""
        for stored_key in self.storage.keys():
            value = self._fetch(stored_key)
            if value is not None:
                yield stored_key, value

    def each(self, visitor: Callable[[Any, Any], None]) -> None:
        """Call visitor(key, value) for every fresh entry."""
        for key, value in self.items():
            visitor(key, value)

    def size(self) -> int:
        """Backend entry count. Stale entries that have not been read still count."""
        return self.storage.size()

    def clear(self) -> None:
        """Remove every entry; the store itself is kept."""
        self.storage.clear()

    def close(self) -> None:
        """Release the backend's handle on its store."""
        self.storage.close()

    def __getitem__(self, key: Hashable) -> Any | None:
        return self.get(key)

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Hashable) -> None:
        self.delete(key)

    def __contains__(self, key: Hashable) -> bool:
        return self.key_present(key) is not None

    def __len__(self) -> int:
        return self.size()

    def __enter__(self) -> "Cache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(storage_details={self.storage_details!r}, "
            f"fresh={self.fresh!r}, storage={type(self.storage).__name__}, encoding={self.encoding!r})"
        )


def main() -> None:
    """Example usage of Cache."""
    import tempfile
    import time

    logging.basicConfig(level=logging.DEBUG)

    with tempfile.TemporaryDirectory() as tmpdir:
        with Cache(f"{tmpdir}/example.db", fresh=1) as cache:
            print("=== Cache Example ===\n")

            print("1. Storing values...")
            cache["one"] = b"value one"
            cache["two"] = b"value two"
            print(f"   size = {cache.size()}, keys = {cache.keys()}")

            print("\n2. Reading a value...")
            print(f"   one = {cache['one']!r}, written at {cache.timestamp_of('one')}")

            print("\n3. Waiting 2 seconds for the freshness window to pass...")
            time.sleep(2)
            print(f"   'one' present: {cache.key_present('one')!r}")
            print(f"   one = {cache['one']!r}")
            print(f"   'one' present after read: {cache.key_present('one')!r}")
            print(f"   size = {cache.size()}")


if __name__ == "__main__":
    main()
