"""Storage backends for cached content and metadata snapshots.

This module provides:
- ContentStore: Abstract base class for content stores
- FileContentStore / VirtualContentStore: Filesystem and in-memory content
- SnapshotStorage: Abstract base class for metadata snapshot storage
- FileSnapshotStorage / MemorySnapshotStorage: File and in-memory snapshots
- StorageRootProvider: Resolves the directory namespaces live under
"""

from simple_cache.storage.content import ContentStore, FileContentStore, VirtualContentStore
from simple_cache.storage.snapshot import (
    FileSnapshotStorage,
    MemorySnapshotStorage,
    SnapshotStorage,
)
from simple_cache.storage.storage_root import (
    StaticStorageRoot,
    StorageRootProvider,
    TempStorageRoot,
)

__all__ = [
    "ContentStore",
    "FileContentStore",
    "FileSnapshotStorage",
    "MemorySnapshotStorage",
    "SnapshotStorage",
    "StaticStorageRoot",
    "StorageRootProvider",
    "TempStorageRoot",
    "VirtualContentStore",
]
