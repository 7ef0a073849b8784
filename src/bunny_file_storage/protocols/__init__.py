"""Protocol interfaces for pluggable backends."""

from bunny_file_storage.protocols.file_storage import (
    DEFAULT_CONTENT_TYPE,
    FileKey,
    FileMetadataEntry,
    FileRecord,
    FileStorage,
    ListOptions,
    ListPage,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "FileKey",
    "FileMetadataEntry",
    "FileRecord",
    "FileStorage",
    "ListOptions",
    "ListPage",
]
