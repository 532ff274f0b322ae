"""File-based snapshot storage: one JSON file per namespace."""

import asyncio
import logging
from pathlib import Path

from simple_cache.storage.fs import read_bytes_or_none, write_bytes_atomic
from simple_cache.storage.snapshot.base import SnapshotStorage

logger = logging.getLogger(__name__)


class FileSnapshotStorage(SnapshotStorage):
    """Stores the metadata snapshot at {storage_root}/{namespace}.json."""

    def __init__(self, path: Path | str):
        """Initialize FileSnapshotStorage.

        Args:
            path: Snapshot file path.
        """
        self.path = Path(path).absolute()

    @property
    def location(self) -> str:
        return str(self.path)

    async def read(self) -> bytes | None:
        return await asyncio.to_thread(read_bytes_or_none, self.path)

    async def write(self, payload: bytes) -> None:
        await asyncio.to_thread(write_bytes_atomic, self.path, payload)
        logger.debug(f"Flushed metadata snapshot ({len(payload)} bytes) to {self.path}")
