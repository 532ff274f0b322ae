"""Snapshot storage: where the metadata index is persisted."""

from simple_cache.storage.snapshot.base import SnapshotStorage
from simple_cache.storage.snapshot.file_snapshot import FileSnapshotStorage
from simple_cache.storage.snapshot.memory_snapshot import MemorySnapshotStorage

__all__ = [
    "FileSnapshotStorage",
    "MemorySnapshotStorage",
    "SnapshotStorage",
]
