"""Tests for file-based content store."""

from pathlib import Path

import pytest

from simple_cache.storage.content.file_store import FileContentStore
from simple_cache.storage.fs import is_temp_file


@pytest.fixture
def content_root(temp_dir: Path) -> Path:
    return temp_dir / "test"


@pytest.fixture
def file_store(content_root: Path) -> FileContentStore:
    """Create a FileContentStore under the temporary directory."""
    return FileContentStore(content_root)


class TestFileContentStore:
    """Tests for FileContentStore class."""

    @pytest.mark.asyncio
    async def test_write_and_read(self, file_store: FileContentStore) -> None:
        """Test basic write and read operations."""
        await file_store.write("key1", b"value1")
        assert await file_store.read("key1") == b"value1"

    @pytest.mark.asyncio
    async def test_read_nonexistent(self, file_store: FileContentStore) -> None:
        """Test that a missing object reads as None, not an error."""
        assert await file_store.read("nonexistent") is None

    @pytest.mark.asyncio
    async def test_read_directory_is_not_found(self, file_store: FileContentStore) -> None:
        await file_store.write("images/logo.png", b"png")
        assert await file_store.read("images") is None

    @pytest.mark.asyncio
    async def test_nested_ids_create_directories(
        self, file_store: FileContentStore, content_root: Path
    ) -> None:
        """Test that '/' in ids creates sub-folders."""
        await file_store.write("cow/fred.js", b"moo")
        await file_store.write("cows.js", b"herd")

        assert (content_root / "cow").is_dir()
        assert (content_root / "cow" / "fred.js").read_bytes() == b"moo"
        assert (content_root / "cows.js").read_bytes() == b"herd"

    @pytest.mark.asyncio
    async def test_overwrite_existing(self, file_store: FileContentStore) -> None:
        """Test overwriting existing content."""
        await file_store.write("key1", b"a much longer first value")
        await file_store.write("key1", b"short")
        assert await file_store.read("key1") == b"short"

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_files(
        self, file_store: FileContentStore, content_root: Path
    ) -> None:
        """Test that atomic writes clean up after themselves."""
        for i in range(5):
            await file_store.write("key1", f"value{i}".encode())

        leftovers = [p for p in content_root.rglob("*") if is_temp_file(p)]
        assert leftovers == []

    @pytest.mark.asyncio
    async def test_empty_payload(self, file_store: FileContentStore) -> None:
        await file_store.write("empty", b"")
        assert await file_store.read("empty") == b""

    @pytest.mark.asyncio
    async def test_delete(self, file_store: FileContentStore) -> None:
        """Test delete operation."""
        await file_store.write("key1", b"value1")

        assert await file_store.delete("key1")
        assert await file_store.read("key1") is None

    @pytest.mark.asyncio
    async def test_delete_nonexistent(self, file_store: FileContentStore) -> None:
        """Test that deleting a missing id is not an error."""
        assert not await file_store.delete("nonexistent")
        assert not await file_store.delete("nested/nonexistent")

    @pytest.mark.asyncio
    async def test_delete_prunes_empty_directories(
        self, file_store: FileContentStore, content_root: Path
    ) -> None:
        """Test that emptied sub-folders are removed, siblings kept."""
        await file_store.write("a/b/c.txt", b"c")
        await file_store.write("a/keep.txt", b"k")

        await file_store.delete("a/b/c.txt")

        assert not (content_root / "a" / "b").exists()
        assert (content_root / "a" / "keep.txt").exists()
        assert content_root.exists()

    @pytest.mark.asyncio
    async def test_delete_all(self, file_store: FileContentStore, content_root: Path) -> None:
        """Test clearing every file under the content root."""
        await file_store.write("key1", b"1")
        await file_store.write("nested/key2", b"2")
        await file_store.write("nested/deeper/key3", b"3")

        assert await file_store.delete_all() == 3
        assert [p for p in content_root.rglob("*")] == []

    @pytest.mark.asyncio
    async def test_delete_all_empty(self, file_store: FileContentStore) -> None:
        """Test clearing a content root that was never created."""
        assert await file_store.delete_all() == 0

    @pytest.mark.asyncio
    async def test_delete_all_scoped_to_namespace(self, temp_dir: Path) -> None:
        """Test that clearing one namespace leaves siblings and snapshots alone."""
        first = FileContentStore(temp_dir / "first")
        second = FileContentStore(temp_dir / "second")
        snapshot = temp_dir / "first.json"
        snapshot.write_text("{}")

        await first.write("key", b"1")
        await second.write("key", b"2")

        await first.delete_all()

        assert await first.read("key") is None
        assert await second.read("key") == b"2"
        assert snapshot.exists()

    @pytest.mark.asyncio
    async def test_delete_all_continues_past_failures(
        self,
        file_store: FileContentStore,
        content_root: Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that one undeletable file does not stop the rest."""
        await file_store.write("a.txt", b"a")
        await file_store.write("locked.txt", b"locked")
        await file_store.write("sub/b.txt", b"b")

        original_unlink = Path.unlink

        def flaky_unlink(self: Path, missing_ok: bool = False) -> None:
            if self.name == "locked.txt":
                raise PermissionError("Permission denied")
            original_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", flaky_unlink)

        with caplog.at_level("WARNING"):
            deleted = await file_store.delete_all()

        assert deleted == 2
        assert (content_root / "locked.txt").exists()
        assert not (content_root / "a.txt").exists()
        assert not (content_root / "sub").exists()
        assert "locked.txt" in caplog.text

    @pytest.mark.asyncio
    async def test_id_escaping_root_rejected(self, file_store: FileContentStore) -> None:
        with pytest.raises(ValueError):
            await file_store.write("../outside", b"x")

    @pytest.mark.asyncio
    async def test_special_characters_in_id(self, file_store: FileContentStore) -> None:
        """Test ids with characters that are legal in file names."""
        for cache_id in ["key:with:colons", "key with spaces", "key@with#symbols"]:
            await file_store.write(cache_id, cache_id.encode())
            assert await file_store.read(cache_id) == cache_id.encode()


def test_location_is_content_root(temp_dir: Path) -> None:
    store = FileContentStore(temp_dir / "ns")
    assert store.location == str(temp_dir / "ns")
