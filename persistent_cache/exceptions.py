"""Exception hierarchy for persistent_cache.

Every error raised by a storage backend or the cache façade derives from
StorageError, so callers can catch the whole family at once.
"""


class StorageError(Exception):
    """Base class for all cache and storage errors."""


class InvalidArgumentError(StorageError, ValueError):
    """A key, value or construction parameter is not acceptable.

    Raised for missing storage details, unknown backend kinds, keys or values
    of the wrong type for a backend, and directory keys that would escape the
    storage root.
    """


class StorageUnavailableError(StorageError):
    """The backend could not create or open its physical store."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class StorageBusyError(StorageError):
    """The SQLite backend gave up waiting for another connection's lock."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class StorageBackendError(StorageError):
    """A physical-layer operation failed (I/O, permissions, corrupt data).

    Args:
        message: What the backend was doing when it failed.
        original_error: The exception raised by the underlying layer.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
