"""File-based content store.

Stores each cached object as a plain file under the namespace content root.
Identifiers containing '/' create nested directories.
"""

import asyncio
import logging
import os
from pathlib import Path

from simple_cache.storage.content.base import ContentStore
from simple_cache.storage.fs import (
    delete_tree_files,
    prune_empty_dirs,
    read_bytes_or_none,
    write_bytes_atomic,
)

logger = logging.getLogger(__name__)


class FileContentStore(ContentStore):
    """Filesystem-backed content store.

    Directory structure:
        {content_root}/
        ├── cows
        ├── cows.js
        └── cow/
            └── fred.js

    Blocking file operations run in worker threads so they do not stall
    other tasks on the event loop.
    """

    def __init__(self, content_root: Path | str):
        """Initialize FileContentStore.

        Args:
            content_root: Directory owned by one namespace, usually {storage_root}/{namespace}.
        """
        self.content_root = Path(os.path.normpath(Path(content_root).absolute()))

    @property
    def location(self) -> str:
        return str(self.content_root)

    def _content_path(self, cache_id: str) -> Path:
        """Get the file path for a cache id, refusing paths outside the root."""
        path = Path(os.path.normpath(self.content_root / cache_id))
        if self.content_root not in path.parents:
            raise ValueError(f"Cache id escapes content root: {cache_id!r}")
        return path

    async def write(self, cache_id: str, data: bytes) -> None:
        path = self._content_path(cache_id)
        await asyncio.to_thread(write_bytes_atomic, path, data)
        logger.debug(f"Wrote {len(data)} bytes for id={cache_id}")

    async def read(self, cache_id: str) -> bytes | None:
        path = self._content_path(cache_id)
        return await asyncio.to_thread(read_bytes_or_none, path)

    async def delete(self, cache_id: str) -> bool:
        path = self._content_path(cache_id)
        return await asyncio.to_thread(self._delete_sync, path)

    def _delete_sync(self, path: Path) -> bool:
        if not path.is_file():
            return False
        path.unlink(missing_ok=True)
        prune_empty_dirs(path.parent, self.content_root)
        return True

    async def delete_all(self) -> int:
        """Delete every file under the content root.

        Only this namespace's directory is touched; sibling namespaces and
        snapshot files under the same storage root are left alone.

        Returns:
            Number of files deleted.
        """
        deleted, failed = await asyncio.to_thread(delete_tree_files, self.content_root)
        if failed:
            logger.warning(f"Cleared {deleted} files from {self.content_root}, {failed} could not be deleted")
        else:
            logger.info(f"Cleared {deleted} files from {self.content_root}")
        return deleted


def main() -> None:
    """Example usage of FileContentStore."""
    import tempfile

    logging.basicConfig(level=logging.DEBUG)

    async def run(tmpdir: str) -> None:
        store = FileContentStore(Path(tmpdir) / "example")

        print("=== FileContentStore Example ===\n")

        print("1. Writing nested ids...")
        await store.write("images/logo.png", b"\x89PNG")
        await store.write("notes.txt", b"hello")
        print(f"   Files: {sorted(p.name for p in store.content_root.rglob('*') if p.is_file())}")

        print("\n2. Reading...")
        print(f"   notes.txt = {await store.read('notes.txt')!r}")
        print(f"   missing   = {await store.read('missing')!r}")

        print("\n3. Deleting images/logo.png...")
        print(f"   Deleted: {await store.delete('images/logo.png')}")
        print(f"   images/ still exists: {(store.content_root / 'images').exists()}")

        print("\n4. Clearing...")
        print(f"   Cleared {await store.delete_all()} files")

    with tempfile.TemporaryDirectory() as tmpdir:
        asyncio.run(run(tmpdir))


if __name__ == "__main__":
    main()
