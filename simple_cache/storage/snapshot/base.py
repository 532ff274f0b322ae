"""Abstract base class for metadata snapshot storage.

A snapshot is the whole namespace's metadata index encoded as one blob.
Snapshot storage only moves that blob to and from durable storage; it
does not interpret it.
"""

from abc import ABC, abstractmethod


class SnapshotStorage(ABC):
    """Abstract base class for snapshot storage implementations."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Identifier of where the snapshot lives."""
        ...

    @abstractmethod
    async def read(self) -> bytes | None:
        """Read the stored snapshot.

        Returns:
            Snapshot bytes, or None if no snapshot has been written yet.

        Raises:
            OSError: If the snapshot exists but cannot be read.
        """
        ...

    @abstractmethod
    async def write(self, payload: bytes) -> None:
        """Replace the stored snapshot.

        Args:
            payload: Encoded snapshot.

        Raises:
            OSError: If the snapshot cannot be written.
        """
        ...
