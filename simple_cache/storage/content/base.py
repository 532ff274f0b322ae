"""Abstract base class for content stores.

A content store holds the raw bytes of cached objects, keyed by cache id.
It knows nothing about TTLs or metadata; the engine keeps the metadata
index consistent with it.
"""

from abc import ABC, abstractmethod


class ContentStore(ABC):
    """Abstract base class for content store implementations.

    Provides the capability set {write, read, delete, delete-all} over
    bytes stored under string identifiers. Implementations may be backed
    by a filesystem or by memory.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Identifier of the backing location (directory path or memory URI)."""
        ...

    @abstractmethod
    async def write(self, cache_id: str, data: bytes) -> None:
        """Store bytes under an identifier, replacing existing content.

        Args:
            cache_id: Identifier, possibly containing '/' separators.
            data: Content to store.

        Raises:
            OSError: If the underlying storage rejects the write.
        """
        ...

    @abstractmethod
    async def read(self, cache_id: str) -> bytes | None:
        """Read bytes stored under an identifier.

        Args:
            cache_id: Identifier to read.

        Returns:
            Stored bytes, or None if nothing is stored under the identifier.
            A missing object is an expected outcome, not an error.
        """
        ...

    @abstractmethod
    async def delete(self, cache_id: str) -> bool:
        """Delete content stored under an identifier.

        Args:
            cache_id: Identifier to delete.

        Returns:
            True if content was deleted, False if none existed.
        """
        ...

    @abstractmethod
    async def delete_all(self) -> int:
        """Delete all content owned by this store.

        Individual failures are logged and skipped.

        Returns:
            Number of objects deleted.
        """
        ...
