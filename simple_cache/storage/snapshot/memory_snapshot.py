"""In-memory snapshot storage."""

from simple_cache.consts import VIRTUAL_LOCATION_PREFIX
from simple_cache.storage.snapshot.base import SnapshotStorage


class MemorySnapshotStorage(SnapshotStorage):
    """Keeps the last written snapshot in memory and counts writes.

    Used by the virtual cache variant, and handy wherever snapshot writes
    need to be observed.
    """

    def __init__(self, name: str = "default", payload: bytes | None = None):
        self.name = name
        self.payload = payload
        self.write_count = 0

    @property
    def location(self) -> str:
        return f"{VIRTUAL_LOCATION_PREFIX}{self.name}.snapshot"

    async def read(self) -> bytes | None:
        return self.payload

    async def write(self, payload: bytes) -> None:
        self.payload = payload
        self.write_count += 1
