"""SQLite storage backend.

Entries live in a single table of three TEXT columns:

    key_value(key TEXT, value TEXT, timestamp TEXT)

Keys are stored as "s:<text>" for str keys and "x:<hex>" for bytes keys, so
the two never collide and ORDER BY key sorts them naturally. Values are
base64 text. Timestamps are ISO 8601 strings.

The database file may be shared by several processes. Each connection waits
up to DB_TIMEOUT seconds for another connection's lock before giving up with
StorageBusyError. save() is a delete followed by an insert in two separate
transactions, so a concurrent reader can briefly see the key as absent.
"""

import base64
import binascii
import logging
import sqlite3
import threading
import weakref
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from persistent_cache.consts import DB_COLUMNS, DB_TABLE, DB_TIMEOUT
from persistent_cache.exceptions import (
    InvalidArgumentError,
    StorageBackendError,
    StorageBusyError,
    StorageUnavailableError,
)
from persistent_cache.models.common import _utc_now, format_timestamp, parse_timestamp
from persistent_cache.models.model_entry import StoredEntry
from persistent_cache.storage.base import StorageBackend, storage_location

logger = logging.getLogger(__name__)

_TEXT_KEY = "s"
_BYTES_KEY = "x"


def encode_key(key: Hashable) -> str:
    """Text form of a key as stored in the key column."""
    if isinstance(key, str):
        return f"{_TEXT_KEY}:{key}"
    if isinstance(key, bytes):
        return f"{_BYTES_KEY}:{key.hex()}"
    raise InvalidArgumentError(f"SQLite keys must be str or bytes, got {type(key).__name__}")


def decode_key(text: str) -> str | bytes:
    """Inverse of encode_key."""
    kind, sep, body = text.partition(":")
    if sep and kind == _TEXT_KEY:
        return body
    if sep and kind == _BYTES_KEY:
        return bytes.fromhex(body)
    raise StorageBackendError(f"Unrecognised key column value {text!r}")


def encode_value(value: bytes) -> str:
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidArgumentError(f"SQLite values must be bytes, got {type(value).__name__}")
    return base64.b64encode(bytes(value)).decode("ascii")


def decode_value(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise StorageBackendError("Stored value is not valid base64", original_error=e) from e


def _wrap_sqlite_error(action: str, error: sqlite3.Error) -> Exception:
    """Map a sqlite3 error onto the storage exception hierarchy."""
    message = str(error).lower()
    if isinstance(error, sqlite3.OperationalError) and ("locked" in message or "busy" in message):
        return StorageBusyError(f"Database busy while trying to {action}: {error}", original_error=error)
    return StorageBackendError(f"Failed to {action}: {error}", original_error=error)


class SQLiteStorage(StorageBackend):
    """Single-file SQLite storage.

    One connection is opened per instance and shared between threads behind
    a lock. Cross-process coordination relies on SQLite's own file locking
    plus the busy timeout.
    """

    def __init__(self, storage_details: str | Path, timeout: float = DB_TIMEOUT):
        """Open or create the database and make sure the table exists.

        Args:
            storage_details: Path of the database file (or ":memory:").
            timeout: Seconds to wait for another connection's lock.

        Raises:
            InvalidArgumentError: If no path is given.
            StorageUnavailableError: If the file cannot be opened, or holds a
                key_value table with an unexpected layout.
        """
        self.storage_details = storage_location(storage_details)
        self.timeout = timeout
        self._lock = threading.RLock()

        try:
            self.storage_handler = sqlite3.connect(
                self.storage_details,
                timeout=timeout,
                check_same_thread=False,
            )
        except sqlite3.Error as e:
            raise StorageUnavailableError(
                f"Failed to open database '{self.storage_details}': {e}", original_error=e
            ) from e

        # Closes the connection once, on close() or when this store is collected.
        self._finalizer = weakref.finalize(self, self.storage_handler.close)

        try:
            self._init_schema()
        except StorageUnavailableError:
            self._finalizer()
            raise
        except (sqlite3.Error, StorageBackendError) as e:
            self._finalizer()
            raise StorageUnavailableError(
                f"Failed to initialise database '{self.storage_details}': {e}", original_error=e
            ) from e

        logger.info(f"Opened SQLite store at {self.storage_details}")

    @contextmanager
    def _cursor(self, action: str) -> Iterator[sqlite3.Cursor]:
        """Cursor in its own transaction: commit on success, rollback on error."""
        with self._lock:
            try:
                cursor = self.storage_handler.cursor()
            except sqlite3.Error as e:
                raise _wrap_sqlite_error(action, e) from e
            try:
                yield cursor
                self.storage_handler.commit()
            except sqlite3.Error as e:
                self.storage_handler.rollback()
                raise _wrap_sqlite_error(action, e) from e
            except Exception:
                self.storage_handler.rollback()
                raise
            finally:
                cursor.close()

    def _init_schema(self) -> None:
        with self._cursor("create schema") as cursor:
            cursor.execute(f"PRAGMA table_info({DB_TABLE})")
            columns = tuple(row[1] for row in cursor.fetchall())
            if not columns:
                cursor.execute(f"CREATE TABLE IF NOT EXISTS {DB_TABLE} (key TEXT, value TEXT, timestamp TEXT)")
                logger.debug(f"Created table {DB_TABLE} in {self.storage_details}")
            elif columns != DB_COLUMNS:
                raise StorageUnavailableError(
                    f"Table {DB_TABLE} in '{self.storage_details}' has columns {columns}, expected {DB_COLUMNS}"
                )

    def save(self, key: Hashable, value: bytes, timestamp: datetime | None = None) -> None:
        encoded_key = encode_key(key)
        encoded_value = encode_value(value)

        self.delete(key)
        with self._cursor(f"store key {key!r}") as cursor:
            written_at = timestamp if timestamp is not None else _utc_now()
            cursor.execute(
                f"INSERT INTO {DB_TABLE} (key, value, timestamp) VALUES (?, ?, ?)",
                (encoded_key, encoded_value, format_timestamp(written_at)),
            )
        logger.debug(f"Stored key={key!r} in {self.storage_details}")

    def lookup(self, key: Hashable) -> StoredEntry | None:
        encoded_key = encode_key(key)
        with self._cursor(f"look up key {key!r}") as cursor:
            cursor.execute(f"SELECT value, timestamp FROM {DB_TABLE} WHERE key = ? LIMIT 1", (encoded_key,))
            row = cursor.fetchone()
        if row is None:
            return None

        value, timestamp = row
        try:
            written_at = parse_timestamp(timestamp)
        except (TypeError, ValueError) as e:
            raise StorageBackendError(f"Unreadable timestamp {timestamp!r} for key {key!r}", original_error=e) from e
        return StoredEntry(value=decode_value(value), timestamp=written_at)

    def delete(self, key: Hashable) -> None:
        encoded_key = encode_key(key)
        with self._cursor(f"delete key {key!r}") as cursor:
            cursor.execute(f"DELETE FROM {DB_TABLE} WHERE key = ?", (encoded_key,))
            deleted = cursor.rowcount
        if deleted:
            logger.debug(f"Deleted key={key!r} from {self.storage_details}")

    def keys(self) -> list[str | bytes]:
        with self._cursor("list keys") as cursor:
            cursor.execute(f"SELECT DISTINCT key FROM {DB_TABLE} ORDER BY key")
            rows = cursor.fetchall()
        return [decode_key(row[0]) for row in rows]

    def size(self) -> int:
        with self._cursor("count entries") as cursor:
            cursor.execute(f"SELECT COUNT(*) FROM {DB_TABLE}")
            (count,) = cursor.fetchone()
        return count

    def clear(self) -> None:
        with self._cursor("clear entries") as cursor:
            cursor.execute(f"DELETE FROM {DB_TABLE}")
            count = cursor.rowcount
        logger.info(f"Cleared {count} entries from {self.storage_details}")

    def close(self) -> None:
        with self._lock:
            self._finalizer()
        logger.debug(f"Closed SQLite store at {self.storage_details}")
