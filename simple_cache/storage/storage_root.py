"""Storage root providers.

The storage root is the writable directory that holds every namespace's
snapshot file and content directory. Resolving it is treated as an opaque
async lookup so hosts can plug in their own platform-specific logic.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from simple_cache.consts import DEFAULT_STORAGE_ROOT

logger = logging.getLogger(__name__)


class StorageRootProvider(ABC):
    """Supplies the directory that namespaces are stored under."""

    @abstractmethod
    async def resolve(self) -> Path:
        """Return the storage root, creating it if needed.

        Raises:
            OSError: If the directory cannot be created.
        """
        ...

    async def is_writable(self) -> bool:
        """Check whether a real filesystem is usable at the storage root."""
        try:
            root = await self.resolve()
        except OSError as e:
            logger.warning(f"Storage root unavailable: {e}")
            return False
        return await asyncio.to_thread(os.access, root, os.W_OK | os.X_OK)


class StaticStorageRoot(StorageRootProvider):
    """Storage root at a fixed, caller-chosen path."""

    def __init__(self, path: Path | str):
        self.path = Path(path).absolute()

    async def resolve(self) -> Path:
        await asyncio.to_thread(self.path.mkdir, parents=True, exist_ok=True)
        return self.path


class TempStorageRoot(StaticStorageRoot):
    """Storage root under the platform temporary directory.

    Defaults to consts.DEFAULT_STORAGE_ROOT, which honours SIMPLE_CACHE_ROOT.
    """

    def __init__(self, path: Path | str | None = None):
        super().__init__(path if path is not None else DEFAULT_STORAGE_ROOT)
