"""Tests for local file storage backend."""

import tempfile

import pytest

from bunny_file_storage.backends.files.local import LocalFileStorage
from bunny_file_storage.exceptions import (
    InputValidationError,
    KeyNotFoundError,
    PreserveRootError,
)
from bunny_file_storage.protocols import FileKey, FileRecord, FileStorage


@pytest.fixture
def file_storage():
    """Create a temporary file storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield LocalFileStorage(path=tmpdir)


class TestLocalFileStorage:
    """Tests for LocalFileStorage."""

    def test_satisfies_protocol(self, file_storage):
        """The backend implements the FileStorage protocol."""
        assert isinstance(file_storage, FileStorage)

    @pytest.mark.asyncio
    async def test_put_and_get(self, file_storage):
        """Test storing and retrieving a file."""
        file = FileRecord(name="test.txt", content=b"Hello, World!")
        result = await file_storage.put("/test.txt", file)
        assert result is file

        retrieved = await file_storage.get("/test.txt")
        assert retrieved is not None
        assert retrieved.content == b"Hello, World!"
        assert retrieved.name == "test.txt"
        assert retrieved.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_set_raw_bytes(self, file_storage):
        """set accepts raw bytes and returns nothing."""
        assert await file_storage.set("data/blob", b"\x00\x01") is None

        retrieved = await file_storage.get("/data/blob")
        assert retrieved is not None
        assert retrieved.content == b"\x00\x01"
        assert retrieved.content_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_get_nonexistent(self, file_storage):
        """Test getting a file that doesn't exist."""
        assert await file_storage.get("/nonexistent.txt") is None

    @pytest.mark.asyncio
    async def test_has(self, file_storage):
        """Test existence checks."""
        await file_storage.set("/a.txt", b"a")

        assert await file_storage.has("/a.txt") is True
        assert await file_storage.has("/b.txt") is False

    @pytest.mark.asyncio
    async def test_has_directory(self, file_storage):
        """Directories are not reported as files."""
        await file_storage.set("/dir/a.txt", b"a")

        assert await file_storage.has("/dir/") is False
        assert await file_storage.has("/dir") is False

    @pytest.mark.asyncio
    async def test_remove_file(self, file_storage):
        """Test deleting a file."""
        await file_storage.set("/test.txt", b"content")
        await file_storage.remove("/test.txt")

        assert await file_storage.get("/test.txt") is None

    @pytest.mark.asyncio
    async def test_remove_directory(self, file_storage):
        """Removing a directory removes its contents."""
        await file_storage.set("/dir/a.txt", b"a")
        await file_storage.set("/dir/sub/b.txt", b"b")

        await file_storage.remove("/dir/")

        assert await file_storage.has("/dir/a.txt") is False
        assert await file_storage.has("/dir/sub/b.txt") is False

    @pytest.mark.asyncio
    async def test_remove_nonexistent(self, file_storage):
        """Deleting a missing key is an error."""
        with pytest.raises(KeyNotFoundError):
            await file_storage.remove("/nonexistent.txt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "/", "//", "./", "/.", "%2F"])
    async def test_root_is_preserved(self, file_storage, key):
        """The base directory cannot be removed by default."""
        await file_storage.set("/keep.txt", b"keep")

        with pytest.raises(PreserveRootError):
            await file_storage.remove(key)

        assert await file_storage.has("/keep.txt") is True

    @pytest.mark.asyncio
    async def test_root_removal_when_disabled(self):
        """With the guard off, everything is removed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = LocalFileStorage(path=tmpdir, preserve_root=False)
            await storage.set("/a.txt", b"a")

            await storage.remove("/")

            assert await storage.has("/a.txt") is False
            assert storage.base_path.is_dir()

    @pytest.mark.asyncio
    async def test_list(self, file_storage):
        """Listing is one level deep and skips directories."""
        await file_storage.set("dir/file1.txt", b"content1")
        await file_storage.set("dir/file2.txt", b"content2")
        await file_storage.set("dir/nested/file3.txt", b"content3")
        await file_storage.set("other/file4.txt", b"content4")

        page = await file_storage.list(prefix="/dir")

        assert page.files == [FileKey(key="/dir/file1.txt"), FileKey(key="/dir/file2.txt")]
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_list_metadata(self, file_storage):
        """Metadata describes the stored files."""
        await file_storage.set("/dir/file1.txt", b"content1")

        page = await file_storage.list(prefix="/dir/", include_metadata=True)

        entry = page.files[0]
        assert entry.key == "/dir/file1.txt"
        assert entry.name == "file1.txt"
        assert entry.size == len(b"content1")
        assert entry.type == "text/plain"
        assert entry.last_modified > 0

    @pytest.mark.asyncio
    async def test_list_pages(self, file_storage):
        """Cursors walk the listing page by page."""
        for i in range(5):
            await file_storage.set(f"/dir/{i}.txt", b"x")

        first = await file_storage.list(prefix="/dir/", limit=2)
        second = await file_storage.list(prefix="/dir/", limit=2, cursor=first.cursor)
        third = await file_storage.list(prefix="/dir/", limit=2, cursor=second.cursor)

        keys = [f.key for page in (first, second, third) for f in page.files]
        assert keys == [f"/dir/{i}.txt" for i in range(5)]
        assert third.cursor is None

    @pytest.mark.asyncio
    async def test_list_missing_directory(self, file_storage):
        """A missing directory lists as empty."""
        page = await file_storage.list(prefix="/missing/")
        assert page.files == []
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_list_invalid_options(self, file_storage):
        """Options are validated like the Bunny backend does."""
        with pytest.raises(InputValidationError, match="limit"):
            await file_storage.list(limit=-1)
        with pytest.raises(InputValidationError, match="cursor"):
            await file_storage.list(cursor="-1")

    @pytest.mark.asyncio
    async def test_nested_directory(self, file_storage):
        """Test storing files in nested directories."""
        await file_storage.set("a/b/c/file.txt", b"nested content")

        result = await file_storage.get("/a/b/c/file.txt")
        assert result is not None
        assert result.content == b"nested content"

    def test_path_traversal_prevention(self, file_storage):
        """Test that path traversal is prevented."""
        with pytest.raises(ValueError):
            file_storage._get_path("../../../etc/passwd")

        with pytest.raises(ValueError):
            file_storage._get_path("/dir/%2e%2e/%2e%2e/etc/passwd")

        with pytest.raises(ValueError):
            file_storage._get_path("dir\\file")
