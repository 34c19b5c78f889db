"""In-process storage backend.

Entries live in a dict owned by the backend instance and disappear with the
process. Keys and values are kept exactly as given.
"""

import logging
import threading
from collections.abc import Hashable
from datetime import datetime
from typing import Any

from persistent_cache.models.common import _utc_now, ensure_utc
from persistent_cache.models.model_entry import StoredEntry
from persistent_cache.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class RAMStorage(StorageBackend):
    """Dict-backed storage, guarded by a re-entrant lock.

    Keys are returned in insertion order. A key that is saved again moves to
    the end, since saving replaces the entry.
    """

    def __init__(self, storage_details: str | None = None):
        """Initialize RAMStorage.

        Args:
            storage_details: Label for the store; kept for symmetry with the
                persistent backends and not otherwise used.
        """
        self.storage_details = storage_details or "ram"
        self.storage: dict[Hashable, tuple[Any, datetime]] = {}
        self._lock = threading.RLock()

    def save(self, key: Hashable, value: Any, timestamp: datetime | None = None) -> None:
        with self._lock:
            written_at = ensure_utc(timestamp) if timestamp is not None else _utc_now()
            self.storage.pop(key, None)
            self.storage[key] = (value, written_at)
        logger.debug(f"Stored key={key!r} in RAM")

    def lookup(self, key: Hashable) -> StoredEntry | None:
        with self._lock:
            item = self.storage.get(key)
        if item is None:
            return None
        value, written_at = item
        return StoredEntry(value=value, timestamp=written_at)

    def delete(self, key: Hashable) -> None:
        with self._lock:
            removed = self.storage.pop(key, None)
        if removed is not None:
            logger.debug(f"Deleted key={key!r} from RAM")

    def keys(self) -> list[Hashable]:
        with self._lock:
            return list(self.storage.keys())

    def size(self) -> int:
        with self._lock:
            return len(self.storage)

    def clear(self) -> None:
        with self._lock:
            count = len(self.storage)
            self.storage.clear()
        logger.info(f"Cleared {count} entries from RAM store '{self.storage_details}'")
