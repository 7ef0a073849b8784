"""Utility modules."""

from bunny_file_storage.utils.crypto import generate_checksum
from bunny_file_storage.utils.keys import bunny_path, file_name_from_key, is_root_key
from bunny_file_storage.utils.listing import (
    normalize_prefix,
    paginate,
    resolve_list_options,
    validate_list_options,
)

__all__ = [
    "bunny_path",
    "file_name_from_key",
    "generate_checksum",
    "is_root_key",
    "normalize_prefix",
    "paginate",
    "resolve_list_options",
    "validate_list_options",
]
