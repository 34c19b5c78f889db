"""Runtime configuration for building a Cache."""

import codecs

from pydantic import BaseModel, Field, field_validator

from persistent_cache.consts import FRESH
from persistent_cache.models.model_entry import StorageKind


class CacheConfig(BaseModel):
    """Validated construction parameters for Cache.

    fresh is the freshness window in seconds; None disables expiry.
    """

    storage_details: str = Field(min_length=1, description="SQLite file, root directory or RAM label")
    storage: StorageKind = Field(default=StorageKind.SQLITE)
    fresh: float | None = Field(default=FRESH, ge=0)
    encoding: str | None = Field(default=None, description="Codec applied to text keys")

    @field_validator("storage_details")
    @classmethod
    def storage_details_not_blank(cls, v: str) -> str:
        """Reject whitespace-only locations."""
        if not v.strip():
            msg = "storage_details must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("encoding")
    @classmethod
    def encoding_is_known(cls, v: str | None) -> str | None:
        """Check the codec exists so a typo fails at configuration time."""
        if v is None:
            return v
        try:
            codecs.lookup(v)
        except LookupError as e:
            msg = f"Unknown encoding '{v}'"
            raise ValueError(msg) from e
        return v
