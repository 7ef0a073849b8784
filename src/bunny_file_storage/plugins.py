"""Plugin discovery via Python entry points."""

from importlib.metadata import entry_points
from typing import Any

from bunny_file_storage.config import StorageConfig
from bunny_file_storage.exceptions import ConfigError
from bunny_file_storage.protocols import FileStorage

BACKEND_GROUPS = {
    "files": "bunny_file_storage.backends.files",
}


def discover_backends(group: str) -> dict[str, Any]:
    """Discover all registered backends for a given group.

    Args:
        group: The backend group name (files)

    Returns:
        Dictionary mapping backend names to their classes
    """
    full_group = BACKEND_GROUPS.get(group, group)
    eps = entry_points(group=full_group)
    return {ep.name: ep.load() for ep in eps}


def get_backend(group: str, name: str) -> Any:
    """Get a specific backend class by group and name.

    Args:
        group: The backend group name (files)
        name: The backend name (e.g., "local", "bunny")

    Returns:
        The backend class

    Raises:
        ValueError: If the backend is not found
    """
    backends = discover_backends(group)
    if name not in backends:
        available = ", ".join(sorted(backends.keys())) or "(none)"
        raise ValueError(
            f"Backend '{name}' not found in group '{group}'. Available: {available}"
        )
    return backends[name]


def create_file_storage(backend: str, *args: Any, **kwargs: Any) -> FileStorage:
    """Create a FileStorage instance.

    Args:
        backend: The backend name (e.g., "local", "bunny")
        *args: Backend-specific positional arguments
        **kwargs: Backend-specific configuration

    Returns:
        A FileStorage implementation
    """
    cls = get_backend("files", backend)
    return cls(*args, **kwargs)


def create_file_storage_from_config(config: StorageConfig, **kwargs: Any) -> FileStorage:
    """Create the FileStorage described by a configuration.

    Args:
        config: Storage configuration
        **kwargs: Extra backend arguments (e.g. an httpx transport)

    Raises:
        ConfigError: If the Bunny backend lacks credentials
    """
    if config.backend == "bunny":
        if not config.access_key or not config.storage_zone_name:
            raise ConfigError("The bunny backend requires access_key and storage_zone_name")
        return create_file_storage(
            "bunny",
            config.access_key,
            config.storage_zone_name,
            config.bunny,
            **kwargs,
        )

    return create_file_storage(
        config.backend,
        path=config.path,
        preserve_root=config.bunny.preserve_root,
        **kwargs,
    )
