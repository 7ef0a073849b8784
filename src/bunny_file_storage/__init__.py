"""Bunny File Storage - a Bunny.net Storage backend for key/value file storage."""

from bunny_file_storage.backends.files import BunnyFileStorage, LocalFileStorage
from bunny_file_storage.config import BunnyStorageOptions, StorageConfig
from bunny_file_storage.exceptions import (
    ConfigError,
    FileStorageError,
    InputValidationError,
    KeyNotFoundError,
    PreserveRootError,
    ResponseValidationError,
    TransportError,
    UnknownContentTypeError,
)
from bunny_file_storage.observability import (
    RequestContext,
    configure_logging,
    get_logger,
    register_metric_callback,
)
from bunny_file_storage.plugins import create_file_storage, create_file_storage_from_config
from bunny_file_storage.protocols import (
    FileKey,
    FileMetadataEntry,
    FileRecord,
    FileStorage,
    ListOptions,
    ListPage,
)
from bunny_file_storage.schemas import BunnyListEntry

__version__ = "0.1.0"
__all__ = [
    # Backends
    "BunnyFileStorage",
    "LocalFileStorage",
    "create_file_storage",
    "create_file_storage_from_config",
    # Configuration
    "BunnyStorageOptions",
    "StorageConfig",
    # Types
    "BunnyListEntry",
    "FileKey",
    "FileMetadataEntry",
    "FileRecord",
    "FileStorage",
    "ListOptions",
    "ListPage",
    # Errors
    "ConfigError",
    "FileStorageError",
    "InputValidationError",
    "KeyNotFoundError",
    "PreserveRootError",
    "ResponseValidationError",
    "TransportError",
    "UnknownContentTypeError",
    # Observability
    "RequestContext",
    "configure_logging",
    "get_logger",
    "register_metric_callback",
]
