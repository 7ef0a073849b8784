"""Local filesystem-based file storage."""

import asyncio
import atexit
import mimetypes
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from bunny_file_storage.exceptions import KeyNotFoundError, PreserveRootError
from bunny_file_storage.protocols.file_storage import (
    DEFAULT_CONTENT_TYPE,
    FileKey,
    FileMetadataEntry,
    FileRecord,
    ListOptions,
    ListPage,
)
from bunny_file_storage.utils.keys import file_name_from_key, is_root_key
from bunny_file_storage.utils.listing import (
    normalize_prefix,
    paginate,
    resolve_list_options,
    validate_list_options,
)

# Thread pool for async file I/O - configurable via environment
_max_workers = int(os.environ.get("BUNNY_STORAGE_FILE_WORKERS", "16"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)

# Ensure executor is cleaned up on process exit
atexit.register(_executor.shutdown, wait=False)


def _guess_content_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE


class LocalFileStorage:
    """File storage using the local filesystem.

    Mirrors the behavior of the Bunny backend so the two can be swapped:
    keys may start with a slash, listings are one directory deep and paged
    client side, and removing the root is refused unless preserve_root is
    disabled.
    """

    def __init__(
        self,
        path: str | None = None,
        preserve_root: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize local file storage.

        Args:
            path: Base directory for file storage. Defaults to ./data/files
            preserve_root: Refuse to remove the base directory
            **kwargs: Ignored (for compatibility with other backends)
        """
        self.base_path = Path(path) if path else Path("./data/files")
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.preserve_root = preserve_root

    def _get_path(self, key: str) -> Path:
        """Get the filesystem path for a key.

        Validates the key to prevent path traversal attacks,
        including URL-encoded sequences.
        """
        # Decode URL-encoded characters first to catch encoded traversal attempts
        decoded_key = unquote(key)

        if "\x00" in decoded_key or "\\" in decoded_key:
            raise ValueError(f"Invalid key: {key}")

        relative = decoded_key.lstrip("/")
        if ".." in relative.split("/"):
            raise ValueError(f"Invalid key: {key}")

        target_path = (self.base_path / relative).resolve()

        # Verify the resolved path is within base_path
        try:
            target_path.relative_to(self.base_path.resolve())
        except ValueError:
            raise ValueError("Invalid key: path traversal detected")

        return target_path

    def _key_for(self, path: Path) -> str:
        """Get the key of a stored file."""
        return "/" + path.resolve().relative_to(self.base_path.resolve()).as_posix()

    def _get_metadata(self, path: Path) -> FileMetadataEntry:
        """Get listing metadata for a file."""
        stat = path.stat()
        return FileMetadataEntry(
            key=self._key_for(path),
            name=path.name,
            last_modified=stat.st_mtime_ns // 1_000_000,
            size=stat.st_size,
            type=_guess_content_type(path.name),
        )

    async def _run(self, func: Any) -> Any:
        """Run blocking I/O in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_executor, func)

    async def get(self, key: str) -> FileRecord | None:
        """Read a file. Returns None if not found."""
        path = self._get_path(key)

        def _read() -> FileRecord | None:
            if not path.is_file():
                return None
            name = file_name_from_key(key)
            return FileRecord(
                name=name,
                content=path.read_bytes(),
                content_type=_guess_content_type(name),
            )

        return await self._run(_read)

    async def has(self, key: str) -> bool:
        """Check whether a file exists. Directories do not count."""
        path = self._get_path(key)
        return await self._run(path.is_file)

    async def put(self, key: str, file: FileRecord | bytes) -> FileRecord:
        """Write a file and return it."""
        if not isinstance(file, FileRecord):
            file = FileRecord(name=file_name_from_key(key), content=bytes(file))

        path = self._get_path(key)
        content = file.content

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await self._run(_write)
        return file

    async def set(self, key: str, file: FileRecord | bytes) -> None:
        """Write a file."""
        await self.put(key, file)

    async def remove(self, key: str) -> None:
        """Delete a file, or a directory with everything in it.

        Raises:
            PreserveRootError: If preserve_root is enabled and key is the root
            KeyNotFoundError: If nothing is stored under key
        """
        path = self._get_path(key)

        # "//", "./" and "%2F" resolve to the base directory as well
        if self.preserve_root and (is_root_key(key) or path == self.base_path.resolve()):
            raise PreserveRootError(
                'Denied deletion of root folder because "preserve_root" is enabled. '
                "You may disable this via the constructor options."
            )

        def _delete() -> None:
            if not path.exists():
                raise KeyNotFoundError(f"Key not found: {key}")
            if path.is_dir():
                shutil.rmtree(path)
                # The base directory always exists
                self.base_path.mkdir(parents=True, exist_ok=True)
            else:
                path.unlink()

        await self._run(_delete)

    async def list(self, options: ListOptions | None = None, **kwargs: Any) -> ListPage:
        """List one page of the files in a directory (not recursive).

        Raises:
            InputValidationError: If limit or cursor is malformed
        """
        options = validate_list_options(resolve_list_options(options, **kwargs))
        directory = self._get_path(normalize_prefix(options.prefix))

        def _list_files() -> list[Path]:
            if not directory.is_dir():
                return []
            return sorted(p for p in directory.iterdir() if p.is_file())

        files = await self._run(_list_files)
        page, cursor = paginate(files, options.limit, options.cursor)

        def _describe() -> list[FileKey | FileMetadataEntry]:
            if options.include_metadata:
                return [self._get_metadata(p) for p in page]
            return [FileKey(key=self._key_for(p)) for p in page]

        return ListPage(files=await self._run(_describe), cursor=cursor)
