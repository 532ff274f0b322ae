"""Metadata store: the in-memory index of cache entries.

The index maps cache id -> CacheEntryMetadata. It is hydrated lazily from
the namespace snapshot on first access and mutated synchronously by the
engine; persisting it back is the engine's job (via DebouncedFlusher).
"""

import asyncio
import logging
from collections.abc import Iterator
from datetime import datetime

from pydantic import ValidationError

from simple_cache.models.model_cache import CacheEntryMetadata, MetadataSnapshot, validate_cache_id
from simple_cache.storage.snapshot.base import SnapshotStorage

logger = logging.getLogger(__name__)


class MetadataStore:
    """In-memory metadata index backed by a snapshot.

    Mutating methods are plain (non-async) functions: on a single event loop
    they run to completion without interleaving, so other tasks never see a
    half-applied update.
    """

    def __init__(self, snapshot_storage: SnapshotStorage):
        """Initialize MetadataStore.

        Args:
            snapshot_storage: Where the snapshot is read from on hydration.
        """
        self.snapshot_storage = snapshot_storage
        self._entries: dict[str, CacheEntryMetadata] = {}
        self._hydrated = False
        self._hydrate_lock = asyncio.Lock()

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    async def load(self) -> dict[str, CacheEntryMetadata]:
        """Return the live index, hydrating it from the snapshot on first call.

        A missing, unreadable or corrupt snapshot yields an empty (cold)
        index; the failure is logged and never raised.

        Returns:
            The live mapping of cache id -> entry. Callers must not mutate it.
        """
        if self._hydrated:
            return self._entries

        async with self._hydrate_lock:
            if not self._hydrated:
                loaded = await self._read_snapshot()
                # Entries written while hydration was pending are newer than the snapshot
                loaded.update(self._entries)
                self._entries = loaded
                self._hydrated = True
                logger.info(
                    f"Hydrated {len(self._entries)} metadata entries from {self.snapshot_storage.location}"
                )
        return self._entries

    async def _read_snapshot(self) -> dict[str, CacheEntryMetadata]:
        try:
            payload = await self.snapshot_storage.read()
        except OSError as e:
            logger.warning(f"Failed to read metadata snapshot {self.snapshot_storage.location}: {e}")
            return {}

        if not payload:
            return {}

        try:
            snapshot = MetadataSnapshot.model_validate_json(payload)
        except (ValidationError, ValueError) as e:
            logger.warning(
                f"Corrupt metadata snapshot {self.snapshot_storage.location}, starting cold: {e}"
            )
            return {}

        entries = {}
        for cache_id, entry in snapshot.root.items():
            try:
                validate_cache_id(cache_id)
            except ValueError as e:
                logger.warning(f"Dropping snapshot entry from {self.snapshot_storage.location}: {e}")
                continue
            entries[cache_id] = entry
        return entries

    def get(self, cache_id: str) -> CacheEntryMetadata | None:
        return self._entries.get(cache_id)

    def put(self, entry: CacheEntryMetadata) -> None:
        """Insert or overwrite an entry by id."""
        self._entries[entry.id] = entry

    def remove(self, cache_id: str, expected: CacheEntryMetadata | None = None) -> bool:
        """Remove an entry.

        Args:
            cache_id: Id to remove. Absent ids are a no-op.
            expected: If given, only remove when the current entry is this
                exact object, so a newer write is never dropped.

        Returns:
            True if an entry was removed.
        """
        current = self._entries.get(cache_id)
        if current is None:
            return False
        if expected is not None and current is not expected:
            return False
        del self._entries[cache_id]
        return True

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def entries(self) -> list[CacheEntryMetadata]:
        """Sorted copy of all entries."""
        return [self._entries[key] for key in sorted(self._entries)]

    def expired_ids(self, now: datetime) -> list[str]:
        """Ids of entries that expired strictly before `now` (a copied list)."""
        return [entry.id for entry in list(self._entries.values()) if entry.is_expired(now)]

    def serialize(self) -> bytes:
        """Encode the full index as snapshot JSON, keys sorted."""
        return MetadataSnapshot.from_entries(self._entries).to_json_bytes()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cache_id: object) -> bool:
        return cache_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
