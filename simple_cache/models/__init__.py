"""Pydantic models for simple_cache."""

from simple_cache.models.model_cache import (
    CacheEntryMetadata,
    CacheObject,
    MetadataSnapshot,
    VirtualFile,
    validate_cache_id,
    validate_namespace_id,
)

__all__ = [
    # Metadata index models
    "CacheEntryMetadata",
    "MetadataSnapshot",
    # Read-side models
    "CacheObject",
    "VirtualFile",
    # Validation helpers
    "validate_cache_id",
    "validate_namespace_id",
]
