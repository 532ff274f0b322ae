"""In-process registry enforcing one live engine per cache namespace."""

import logging
import weakref

logger = logging.getLogger(__name__)


class NamespaceInUseError(ValueError):
    """Raised when a second engine is opened on an already-owned namespace."""

    def __init__(self, key: str):
        super().__init__(f"Cache namespace already has a live engine: {key}")
        self.key = key


class NamespaceRegistry:
    """Tracks which engine owns each namespace location.

    Owners are held by weak reference, so an engine that is garbage
    collected without close() stops blocking its namespace.
    """

    def __init__(self) -> None:
        self._owners: weakref.WeakValueDictionary[str, object] = weakref.WeakValueDictionary()

    def claim(self, key: str, owner: object) -> None:
        """Register `owner` for `key`.

        Raises:
            NamespaceInUseError: If another live owner holds the key.
        """
        current = self._owners.get(key)
        if current is not None and current is not owner:
            raise NamespaceInUseError(key)
        self._owners[key] = owner
        logger.debug(f"Claimed cache namespace {key}")

    def release(self, key: str, owner: object) -> None:
        """Release `key` if it is held by `owner`; otherwise do nothing."""
        if self._owners.get(key) is owner:
            del self._owners[key]
            logger.debug(f"Released cache namespace {key}")

    def is_claimed(self, key: str) -> bool:
        return self._owners.get(key) is not None

    def __len__(self) -> int:
        return len(self._owners)


# Process-wide default registry
default_registry = NamespaceRegistry()
