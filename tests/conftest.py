"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio

from simple_cache.engine import SimpleCache, open_cache
from simple_cache.registry import NamespaceRegistry
from simple_cache.storage.content.virtual_store import VirtualContentStore
from simple_cache.storage.snapshot.memory_snapshot import MemorySnapshotStorage


class FakeClock:
    """Controllable UTC clock for TTL tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingContentStore(VirtualContentStore):
    """Virtual store that records deletes and yields to the loop inside them."""

    def __init__(self, name: str = "recording"):
        super().__init__(name)
        self.deleted: list[str] = []

    async def delete(self, cache_id: str) -> bool:
        await asyncio.sleep(0)
        self.deleted.append(cache_id)
        return await super().delete(cache_id)


class FailingContentStore(VirtualContentStore):
    """Virtual store whose writes always fail."""

    async def write(self, cache_id: str, data: bytes) -> None:
        raise OSError("No space left on device")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry() -> NamespaceRegistry:
    """Fresh namespace registry so tests never collide."""
    return NamespaceRegistry()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def file_cache(temp_dir: Path, registry: NamespaceRegistry, clock: FakeClock):
    """Filesystem-backed cache under a temporary storage root."""
    cache = await open_cache(
        "test",
        storage_root=temp_dir,
        virtual=False,
        flush_delay=0.01,
        clock=clock,
        registry=registry,
    )
    yield cache
    await cache.close()


@pytest_asyncio.fixture
async def memory_cache(registry: NamespaceRegistry, clock: FakeClock):
    """In-memory cache with a countable snapshot sink."""
    snapshot = MemorySnapshotStorage("test")
    cache = SimpleCache(
        "test",
        VirtualContentStore("test"),
        snapshot,
        flush_delay=0.01,
        clock=clock,
        registry=registry,
    )
    yield cache
    await cache.close()
