"""Directory-tree storage backend.

Each key is a subdirectory of the storage root holding a single value file:

    {storage_root}/
    ├── {key}/
    │   └── cache        # "<ISO timestamp>\n<raw value bytes>"
    └── {key}/
        └── cache

Keys are used literally as directory names: text keys as given, bytes keys
with their exact bytes (the encoded form of a key under a configured
encoding). Every operation that takes a key validates it first and refuses
anything that would leave the root. Bytes keys with a NUL byte, as UTF-16
produces, cannot name a directory: lookups miss and saves are refused.
"""

import logging
import os
import shutil
from collections.abc import Hashable
from datetime import datetime
from pathlib import Path

from persistent_cache.consts import CACHE_FILE
from persistent_cache.exceptions import (
    InvalidArgumentError,
    StorageBackendError,
    StorageUnavailableError,
)
from persistent_cache.models.common import _utc_now, format_timestamp, parse_timestamp
from persistent_cache.models.model_entry import StoredEntry
from persistent_cache.storage.base import StorageBackend, storage_location

logger = logging.getLogger(__name__)

_SEPARATORS = {sep for sep in ("/", "\\", os.sep, os.altsep) if sep}


class DirectoryStorage(StorageBackend):
    """Filesystem storage with one directory per key.

    No locking is done: concurrent writers to the same key race, and the
    last write of the value file wins.
    """

    def __init__(self, storage_details: str | Path):
        """Initialize DirectoryStorage, creating the root if it does not exist.

        Args:
            storage_details: Path of the storage root. An existing directory
                is used as-is.

        Raises:
            InvalidArgumentError: If no path is given.
            StorageUnavailableError: If the root cannot be created or is not a directory.
        """
        self.storage_details = storage_location(storage_details)
        self.storage_root = Path(storage_details)

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to create storage root '{self.storage_root}': {e}", original_error=e
            ) from e

        if not self.storage_root.is_dir():
            raise StorageUnavailableError(f"Storage root '{self.storage_root}' exists but is not a directory")

        logger.info(f"Using directory store at {self.storage_root}")

    def _key_name(self, key: Hashable) -> str:
        """Validate a key and return the directory name it maps to.

        Bytes keys name the directory with their exact bytes, so a key that is
        not valid UTF-8 comes back from keys() as bytes.
        """
        if isinstance(key, bytes):
            name = os.fsdecode(key)
        elif isinstance(key, str):
            if not key.isprintable():
                raise InvalidArgumentError(f"Invalid directory key {key!r}")
            name = key
        else:
            raise InvalidArgumentError(f"Directory keys must be text, got {type(key).__name__}")

        if name == "":
            raise InvalidArgumentError(f"Invalid directory key {key!r}")
        if name in (".", "..") or any(sep in name for sep in _SEPARATORS):
            raise InvalidArgumentError(f"Key {key!r} is not a single path segment")
        if "\x00" in name:
            return name

        root = self.storage_root.resolve()
        if (root / name).resolve().parent != root:
            raise InvalidArgumentError(f"Key {key!r} resolves outside the storage root")
        return name

    def _key_dir(self, key: Hashable) -> Path | None:
        """Directory for a key, or None for a bytes key no file name can hold."""
        name = self._key_name(key)
        if "\x00" in name:
            return None
        return self.storage_root / name

    @staticmethod
    def _listed_key(name: str) -> str | bytes:
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            return os.fsencode(name)
        return name

    def save(self, key: Hashable, value: bytes, timestamp: datetime | None = None) -> None:
        key_dir = self._key_dir(key)
        if key_dir is None:
            raise InvalidArgumentError(f"Key {key!r} contains a NUL byte and cannot name a directory")
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidArgumentError(f"Directory values must be bytes, got {type(value).__name__}")

        written_at = timestamp if timestamp is not None else _utc_now()
        content = format_timestamp(written_at).encode("ascii") + b"\n" + bytes(value)
        try:
            key_dir.mkdir(exist_ok=True)
            (key_dir / CACHE_FILE).write_bytes(content)
        except OSError as e:
            raise StorageBackendError(f"Failed to store key {key!r}: {e}", original_error=e) from e
        logger.debug(f"Stored key={key!r} in {self.storage_root}")

    def lookup(self, key: Hashable) -> StoredEntry | None:
        key_dir = self._key_dir(key)
        if key_dir is None:
            return None
        path = key_dir / CACHE_FILE
        try:
            content = path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise StorageBackendError(f"Failed to read '{path}': {e}", original_error=e) from e

        header, sep, value = content.partition(b"\n")
        if not sep:
            raise StorageBackendError(f"Value file '{path}' has no timestamp line")
        try:
            written_at = parse_timestamp(header.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as e:
            raise StorageBackendError(f"Value file '{path}' has an unreadable timestamp", original_error=e) from e
        return StoredEntry(value=value, timestamp=written_at)

    def delete(self, key: Hashable) -> None:
        key_dir = self._key_dir(key)
        if key_dir is None:
            return
        try:
            shutil.rmtree(key_dir)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageBackendError(f"Failed to delete key {key!r}: {e}", original_error=e) from e
        logger.debug(f"Deleted key={key!r} from {self.storage_root}")

    def get_value_path(self, key: Hashable) -> Path | None:
        """Path of the value file for a key, or None if the key is not stored."""
        key_dir = self._key_dir(key)
        if key_dir is None:
            return None
        path = key_dir / CACHE_FILE
        return path if path.is_file() else None

    def keys(self) -> list[str | bytes]:
        try:
            names = sorted((p.name for p in self.storage_root.iterdir() if p.is_dir()), key=os.fsencode)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageBackendError(f"Failed to list '{self.storage_root}': {e}", original_error=e) from e
        return [self._listed_key(name) for name in names]

    def size(self) -> int:
        return len(self.keys())

    def clear(self) -> None:
        count = 0
        for key in self.keys():
            name = os.fsdecode(key)
            try:
                shutil.rmtree(self.storage_root / name)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageBackendError(f"Failed to clear key {key!r}: {e}", original_error=e) from e
            count += 1
        logger.info(f"Cleared {count} entries from {self.storage_root}")
