"""Content stores: where cached bytes live."""

from simple_cache.storage.content.base import ContentStore
from simple_cache.storage.content.file_store import FileContentStore
from simple_cache.storage.content.virtual_store import VirtualContentStore

__all__ = [
    "ContentStore",
    "FileContentStore",
    "VirtualContentStore",
]
