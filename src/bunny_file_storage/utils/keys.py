"""Storage key helpers."""

ROOT_KEYS = ("", "/")


def is_root_key(key: str) -> bool:
    """Check whether a key denotes the storage zone root."""
    return key in ROOT_KEYS


def bunny_path(storage_zone_name: str, key: str) -> str:
    """Map a storage key to its path below the storage endpoint.

    The key is not normalized beyond getting exactly one leading slash.
    Directories are addressed with a trailing slash.
    """
    return f"/{storage_zone_name}{key if key.startswith('/') else f'/{key}'}"


def file_name_from_key(key: str) -> str:
    """Get the file name (last path segment) of a key."""
    return key.rsplit("/", 1)[-1] or key
