"""In-memory content store for environments without a usable filesystem."""

import logging

from simple_cache.consts import VIRTUAL_LOCATION_PREFIX
from simple_cache.models.common import _utc_now
from simple_cache.models.model_cache import VirtualFile
from simple_cache.storage.content.base import ContentStore

logger = logging.getLogger(__name__)


class VirtualContentStore(ContentStore):
    """Content store backed by a dict of cache id -> VirtualFile.

    Nothing survives the process; the engine pairs it with an in-memory
    snapshot storage.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._files: dict[str, VirtualFile] = {}

    @property
    def location(self) -> str:
        return f"{VIRTUAL_LOCATION_PREFIX}{self.name}"

    def __len__(self) -> int:
        return len(self._files)

    def get_file(self, cache_id: str) -> VirtualFile | None:
        """Return the stored VirtualFile record, including its modified time."""
        return self._files.get(cache_id)

    async def write(self, cache_id: str, data: bytes) -> None:
        self._files[cache_id] = VirtualFile(path=cache_id, modified=_utc_now(), data=bytes(data))

    async def read(self, cache_id: str) -> bytes | None:
        virtual_file = self._files.get(cache_id)
        return virtual_file.data if virtual_file is not None else None

    async def delete(self, cache_id: str) -> bool:
        return self._files.pop(cache_id, None) is not None

    async def delete_all(self) -> int:
        count = len(self._files)
        self._files.clear()
        logger.info(f"Cleared {count} virtual files from {self.location}")
        return count
