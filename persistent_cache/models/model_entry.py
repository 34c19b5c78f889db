"""Models for entries held by storage backends."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from persistent_cache.consts import STORAGE_DIRECTORY, STORAGE_RAM, STORAGE_SQLITE
from persistent_cache.models.common import _utc_now, ensure_utc


class StorageKind(str, Enum):
    """Supported storage backends."""

    SQLITE = STORAGE_SQLITE
    DIRECTORY = STORAGE_DIRECTORY
    RAM = STORAGE_RAM


class StoredEntry(BaseModel):
    """A value and the instant it was written, as returned by a backend lookup.

    The key is not part of the model: backends return entries for a key the
    caller already holds.
    """

    value: Any
    timestamp: datetime = Field(default_factory=_utc_now)

    @field_validator("timestamp")
    @classmethod
    def timestamp_is_utc(cls, v: datetime) -> datetime:
        """Normalise to an aware UTC datetime."""
        return ensure_utc(v)

    def age_seconds(self, now: datetime | None = None) -> float:
        """Seconds elapsed between the write and now (negative if written in the future)."""
        current = ensure_utc(now) if now is not None else _utc_now()
        return (current - self.timestamp).total_seconds()
