"""Pydantic models for persistent_cache."""

from persistent_cache.models.model_config import CacheConfig
from persistent_cache.models.model_entry import StorageKind, StoredEntry

__all__ = [
    "CacheConfig",
    "StorageKind",
    "StoredEntry",
]
