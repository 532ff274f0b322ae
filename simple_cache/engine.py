"""Cache engine: keeps the metadata index and the content store consistent.

Writes update the metadata index synchronously, persist the bytes through
the content store and schedule a debounced snapshot flush. Reads consult the
index first and self-heal when the content has gone missing. Expired
entries are removed by eviction passes that never overlap.

Only one engine may own a namespace at a time within a process; the
NamespaceRegistry rejects a second one. Nothing coordinates separate
processes sharing a storage root.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from simple_cache.consts import DEFAULT_EVICT_ON_READ, FLUSH_DEBOUNCE_SECONDS, SNAPSHOT_SUFFIX
from simple_cache.metadata import MetadataStore
from simple_cache.models.common import _utc_now
from simple_cache.models.model_cache import (
    CacheEntryMetadata,
    CacheObject,
    validate_cache_id,
    validate_namespace_id,
)
from simple_cache.registry import NamespaceRegistry, default_registry
from simple_cache.scheduler import DebouncedFlusher
from simple_cache.storage.content.base import ContentStore
from simple_cache.storage.content.file_store import FileContentStore
from simple_cache.storage.content.virtual_store import VirtualContentStore
from simple_cache.storage.snapshot.base import SnapshotStorage
from simple_cache.storage.snapshot.file_snapshot import FileSnapshotStorage
from simple_cache.storage.snapshot.memory_snapshot import MemorySnapshotStorage
from simple_cache.storage.storage_root import StaticStorageRoot, StorageRootProvider, TempStorageRoot

logger = logging.getLogger(__name__)

TTL = int | float | timedelta


def _ttl_to_timedelta(ttl: TTL | None) -> timedelta | None:
    """Normalize a TTL given in seconds or as a timedelta."""
    if ttl is None:
        return None
    if isinstance(ttl, bool):
        raise ValueError("TTL must be a number of seconds or a timedelta")
    try:
        lifetime = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
    except OverflowError as e:
        raise ValueError(f"TTL out of range: {ttl!r}") from e
    if lifetime < timedelta(0):
        raise ValueError(f"TTL must not be negative, got {ttl!r}")
    return lifetime


class SimpleCache:
    """Disk-backed object cache for one namespace.

    Stores byte blobs under string ids, with optional TTL. Storage failures
    are logged and degrade to misses; they are never raised to callers.
    """

    def __init__(
        self,
        namespace_id: str,
        content_store: ContentStore,
        snapshot_storage: SnapshotStorage,
        evict_on_read: bool = DEFAULT_EVICT_ON_READ,
        flush_delay: float = FLUSH_DEBOUNCE_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
        registry: NamespaceRegistry | None = None,
    ):
        """Initialize SimpleCache.

        Args:
            namespace_id: Namespace this engine owns.
            content_store: Where cached bytes are kept.
            snapshot_storage: Where the metadata snapshot is kept.
            evict_on_read: Run an eviction pass before every get().
            flush_delay: Debounce window for snapshot flushes, in seconds.
            clock: Returns the current UTC time.
            registry: Namespace registry; defaults to the process-wide one.

        Raises:
            ValueError: If namespace_id is invalid.
            NamespaceInUseError: If another live engine owns the namespace.
        """
        self.namespace_id = validate_namespace_id(namespace_id)
        self.content_store = content_store
        self.evict_on_read = evict_on_read

        self._registry = registry if registry is not None else default_registry
        self._registry.claim(self.location, self)

        self.metadata = MetadataStore(snapshot_storage)
        self._snapshot_storage = snapshot_storage
        self._clock = clock
        self._evict_lock = asyncio.Lock()
        self._writes_in_progress: Counter[str] = Counter()
        self._flusher = DebouncedFlusher(
            self._flush_metadata,
            delay=flush_delay,
            name=f"metadata snapshot for {namespace_id}",
        )
        self._closed = False

    @property
    def location(self) -> str:
        return self.content_store.location

    @property
    def flusher(self) -> DebouncedFlusher:
        return self._flusher

    @property
    def closed(self) -> bool:
        return self._closed

    async def _flush_metadata(self) -> None:
        if not self.metadata.hydrated:
            # Never overwrite a snapshot that was not loaded
            return
        await self._snapshot_storage.write(self.metadata.serialize())

    # === WRITE OPERATIONS ===

    async def write_bytes(self, cache_id: str, data: bytes, ttl: TTL | None = None) -> None:
        """Store bytes under an id.

        Args:
            cache_id: Identifier; '/' separators create nested directories.
            data: Content to store.
            ttl: Time-to-live in seconds or as a timedelta. None never expires.

        Raises:
            ValueError: If the id or TTL is invalid.
        """
        validate_cache_id(cache_id)
        lifetime = _ttl_to_timedelta(ttl)
        await self.metadata.load()

        now = self._clock()
        try:
            expires = None if lifetime is None else now + lifetime
        except OverflowError as e:
            raise ValueError(f"TTL out of range: {ttl!r}") from e
        entry = CacheEntryMetadata(id=cache_id, created=now, expires=expires)
        self.metadata.put(entry)

        self._writes_in_progress[cache_id] += 1
        try:
            await self.content_store.write(cache_id, bytes(data))
            logger.debug(f"Cached id={cache_id} ({len(data)} bytes, ttl={lifetime})")
        except OSError as e:
            logger.warning(f"Failed to write cached content for id={cache_id}: {e}")
        finally:
            self._writes_in_progress[cache_id] -= 1
            if self._writes_in_progress[cache_id] <= 0:
                del self._writes_in_progress[cache_id]

        self._flusher.schedule()

    async def write_string(self, cache_id: str, text: str, ttl: TTL | None = None) -> None:
        """Store text under an id, encoded as UTF-8."""
        await self.write_bytes(cache_id, text.encode("utf-8"), ttl=ttl)

    # === READ OPERATIONS ===

    async def get(self, cache_id: str) -> CacheObject | None:
        """Get a cached object.

        If content is missing while metadata still references it, the stale
        metadata entry is dropped and the call reports a miss.

        Args:
            cache_id: Identifier to look up.

        Returns:
            CacheObject on a hit, None on a miss.
        """
        validate_cache_id(cache_id)
        if self.evict_on_read:
            await self.evict_expired_objects()

        await self.metadata.load()
        entry = self.metadata.get(cache_id)
        if entry is None:
            logger.debug(f"Cache miss for id={cache_id}")
            return None

        try:
            data = await self.content_store.read(cache_id)
        except OSError as e:
            logger.warning(f"Failed to read cached content for id={cache_id}: {e}")
            return None

        if data is None:
            if cache_id in self._writes_in_progress:
                return None
            logger.warning(f"Cache item {cache_id} does not exist in {self.location}, dropping metadata")
            if self.metadata.remove(cache_id, expected=entry):
                self._flusher.schedule()
            return None

        return CacheObject(age=self._clock() - entry.created, expires=entry.expires, data=data)

    async def contains(self, cache_id: str) -> bool:
        """Check whether the metadata index has an entry for the id."""
        validate_cache_id(cache_id)
        await self.metadata.load()
        return cache_id in self.metadata

    async def list_entries(self, include_expired: bool = True) -> list[CacheEntryMetadata]:
        """List metadata entries sorted by id.

        Args:
            include_expired: Include entries that expired but were not evicted yet.
        """
        await self.metadata.load()
        entries = self.metadata.entries()
        if include_expired:
            return entries
        now = self._clock()
        return [entry for entry in entries if not entry.is_expired(now)]

    # === REMOVAL ===

    async def remove(self, cache_id: str) -> bool:
        """Remove an object. Removing an absent id is a no-op.

        Returns:
            True if a metadata entry was removed.
        """
        validate_cache_id(cache_id)
        await self.metadata.load()
        return await self._remove(cache_id)

    async def _remove(self, cache_id: str, expected: CacheEntryMetadata | None = None) -> bool:
        removed = self.metadata.remove(cache_id, expected=expected)
        if expected is not None and not removed:
            # Entry was rewritten or already removed by someone else
            return False

        try:
            await self.content_store.delete(cache_id)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to delete cached content for id={cache_id}: {e}")

        if removed:
            logger.debug(f"Removed id={cache_id}")
            self._flusher.schedule()
        return removed

    async def clear(self) -> int:
        """Remove every object in this namespace, metadata included.

        Returns:
            Number of content objects deleted.
        """
        await self.metadata.load()
        entries = self.metadata.clear()

        deleted = 0
        try:
            deleted = await self.content_store.delete_all()
        except OSError as e:
            logger.warning(f"Failed to clear content for namespace={self.namespace_id}: {e}")

        self._flusher.schedule()
        logger.info(f"Cleared namespace={self.namespace_id} ({entries} entries, {deleted} objects)")
        return deleted

    async def evict_expired_objects(self) -> int:
        """Remove every entry whose expiry is before now.

        Passes are serialized per engine; a caller arriving while a pass runs
        waits for it, then finds nothing left to evict.

        Returns:
            Number of entries evicted by this pass.
        """
        async with self._evict_lock:
            await self.metadata.load()
            now = self._clock()
            evicted = 0
            for cache_id in self.metadata.expired_ids(now):
                entry = self.metadata.get(cache_id)
                if entry is None or not entry.is_expired(now):
                    continue
                if await self._remove(cache_id, expected=entry):
                    evicted += 1

            if evicted:
                logger.info(f"Evicted {evicted} expired entries from namespace={self.namespace_id}")
            return evicted

    # === LIFECYCLE ===

    async def flush(self) -> None:
        """Write the metadata snapshot now instead of waiting for the debounce."""
        await self._flusher.flush_now()

    async def close(self) -> None:
        """Flush pending metadata and release the namespace."""
        if self._closed:
            return
        await self._flusher.drain()
        self._registry.release(self.location, self)
        self._closed = True

    async def __aenter__(self) -> "SimpleCache":
        await self.metadata.load()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with entry counts and storage locations.
        """
        await self.metadata.load()
        now = self._clock()
        entries = self.metadata.entries()
        expired = sum(1 for entry in entries if entry.is_expired(now))
        return {
            "namespace": self.namespace_id,
            "location": self.location,
            "snapshot": self._snapshot_storage.location,
            "evict_on_read": self.evict_on_read,
            "total_entries": len(entries),
            "expired_entries": expired,
            "valid_entries": len(entries) - expired,
            "flush_pending": self._flusher.pending,
        }


def _as_provider(storage_root: StorageRootProvider | Path | str | None) -> StorageRootProvider:
    if storage_root is None:
        return TempStorageRoot()
    if isinstance(storage_root, StorageRootProvider):
        return storage_root
    return StaticStorageRoot(storage_root)


async def open_cache(
    namespace_id: str,
    evict_on_read: bool = DEFAULT_EVICT_ON_READ,
    storage_root: StorageRootProvider | Path | str | None = None,
    virtual: bool | None = None,
    flush_delay: float = FLUSH_DEBOUNCE_SECONDS,
    clock: Callable[[], datetime] = _utc_now,
    registry: NamespaceRegistry | None = None,
) -> SimpleCache:
    """Create a cache engine with the content store suited to the environment.

    Uses the filesystem under the storage root when it is writable, and the
    in-memory variant otherwise. The metadata index is preloaded.

    Args:
        namespace_id: Namespace to open.
        evict_on_read: Run an eviction pass before every get().
        storage_root: Provider or path for the storage root. Defaults to TempStorageRoot.
        virtual: Force the in-memory (True) or filesystem (False) variant.
        flush_delay: Debounce window for snapshot flushes, in seconds.
        clock: Returns the current UTC time.
        registry: Namespace registry; defaults to the process-wide one.

    Returns:
        Ready-to-use SimpleCache.
    """
    validate_namespace_id(namespace_id)
    provider = _as_provider(storage_root)

    if virtual is None:
        virtual = not await provider.is_writable()
        if virtual:
            logger.warning(f"No writable storage root, namespace={namespace_id} will be kept in memory")

    content_store: ContentStore
    snapshot_storage: SnapshotStorage
    if virtual:
        content_store = VirtualContentStore(namespace_id)
        snapshot_storage = MemorySnapshotStorage(namespace_id)
    else:
        root = await provider.resolve()
        content_store = FileContentStore(root / namespace_id)
        snapshot_storage = FileSnapshotStorage(root / f"{namespace_id}{SNAPSHOT_SUFFIX}")

    cache = SimpleCache(
        namespace_id,
        content_store,
        snapshot_storage,
        evict_on_read=evict_on_read,
        flush_delay=flush_delay,
        clock=clock,
        registry=registry,
    )
    await cache.metadata.load()
    return cache


def main() -> None:
    """Example usage of SimpleCache."""
    import tempfile

    logging.basicConfig(level=logging.DEBUG)

    async def run(tmpdir: str) -> None:
        async with await open_cache("example", evict_on_read=True, storage_root=tmpdir) as cache:
            print("=== SimpleCache Example ===\n")

            print("1. Writing values...")
            await cache.write_string("greeting", "hello")
            await cache.write_bytes("images/logo.png", b"\x89PNG", ttl=1)

            print("\n2. Reading values...")
            obj = await cache.get("greeting")
            print(f"   greeting = {obj.text if obj else None}")

            print("\n3. Waiting for TTL=1s to pass...")
            await asyncio.sleep(1.2)
            print(f"   images/logo.png after expiry: {await cache.get('images/logo.png')}")

            print("\n4. Statistics...")
            print(f"   {await cache.stats()}")

        print(f"\nSnapshot: {(Path(tmpdir) / 'example.json').read_text()}")

    with tempfile.TemporaryDirectory() as tmpdir:
        asyncio.run(run(tmpdir))


if __name__ == "__main__":
    main()
