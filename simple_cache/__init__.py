"""simple_cache - embeddable disk-backed object cache with TTL support."""

from simple_cache.engine import SimpleCache, open_cache
from simple_cache.metadata import MetadataStore
from simple_cache.models import CacheEntryMetadata, CacheObject
from simple_cache.registry import NamespaceInUseError, NamespaceRegistry
from simple_cache.scheduler import DebouncedFlusher

__version__ = "0.1.0"

__all__ = [
    "CacheEntryMetadata",
    "CacheObject",
    "DebouncedFlusher",
    "MetadataStore",
    "NamespaceInUseError",
    "NamespaceRegistry",
    "SimpleCache",
    "open_cache",
]
