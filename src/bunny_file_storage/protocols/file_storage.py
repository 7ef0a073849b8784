"""FileStorage protocol for file storage backends."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileRecord:
    """File content together with its name and MIME type."""

    name: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def size(self) -> int:
        """Size of the content in bytes."""
        return len(self.content)

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the content as text."""
        return self.content.decode(encoding)


@dataclass(frozen=True)
class FileKey:
    """A listed file without metadata."""

    key: str


@dataclass(frozen=True)
class FileMetadataEntry:
    """A listed file with metadata."""

    key: str
    name: str
    last_modified: int  # epoch milliseconds
    size: int
    type: str


@dataclass
class ListOptions:
    """Options for listing a directory."""

    prefix: str = "/"
    limit: int | None = None
    cursor: str | None = None
    include_metadata: bool = False


@dataclass(frozen=True)
class ListPage:
    """One page of a directory listing.

    `cursor` is None when there are no further pages. Otherwise it must be
    passed back verbatim to fetch the next page.
    """

    files: list[FileKey | FileMetadataEntry]
    cursor: str | None = None


@runtime_checkable
class FileStorage(Protocol):
    """Protocol for file storage backends (Bunny, local filesystem)."""

    async def get(self, key: str) -> FileRecord | None:
        """Retrieve a file. Returns None if not found."""
        ...

    async def has(self, key: str) -> bool:
        """Check whether a file exists."""
        ...

    async def list(self, options: ListOptions | None = None) -> ListPage:
        """List one page of the files under a prefix."""
        ...

    async def put(self, key: str, file: FileRecord) -> FileRecord:
        """Store a file and return it."""
        ...

    async def set(self, key: str, file: FileRecord) -> None:
        """Store a file."""
        ...

    async def remove(self, key: str) -> None:
        """Remove a file or directory."""
        ...
