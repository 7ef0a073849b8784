"""Configuration loading with environment variable substitution."""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bunny_file_storage.exceptions import ConfigError

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")

DEFAULT_STORAGE_ENDPOINT = "https://storage.bunnycdn.com"


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} patterns with environment variables."""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable {var_name} is not set")
            return env_value

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


class BunnyStorageOptions(BaseModel):
    """Behavior switches of the Bunny storage backend."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Regional endpoints look like https://se.storage.bunnycdn.com
    storage_endpoint_url: str = DEFAULT_STORAGE_ENDPOINT
    # Send a SHA-256 checksum with uploads so the server rejects corrupted bodies
    generate_checksums: bool = True
    # Deleting "/" removes the whole storage zone recursively
    preserve_root: bool = True


class StorageConfig(BaseModel):
    """File storage backend configuration."""

    backend: str = "local"  # local | bunny
    # Backend-specific settings
    path: str | None = None  # For local backend
    access_key: str | None = None  # For Bunny
    storage_zone_name: str | None = None
    bunny: BunnyStorageOptions = Field(default_factory=BunnyStorageOptions)

    @classmethod
    def from_file(cls, path: str | Path) -> "StorageConfig":
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        with path.open() as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StorageConfig":
        """Load configuration from a dictionary."""
        data = substitute_env_vars(data)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid storage configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "StorageConfig":
        """Build a Bunny backend configuration from environment variables.

        Reads BUNNY_ACCESS_KEY and BUNNY_STORAGE_ZONE_NAME, and optionally
        BUNNY_STORAGE_ENDPOINT.

        Raises:
            ConfigError: If a required variable is missing or empty
        """
        env = os.environ if environ is None else environ

        values = {}
        for name in ("BUNNY_ACCESS_KEY", "BUNNY_STORAGE_ZONE_NAME"):
            value = env.get(name)
            if not value:
                raise ConfigError(f"Environment variable {name} is not set")
            values[name] = value

        options: dict[str, Any] = {}
        endpoint = env.get("BUNNY_STORAGE_ENDPOINT")
        if endpoint:
            options["storage_endpoint_url"] = endpoint

        return cls(
            backend="bunny",
            access_key=values["BUNNY_ACCESS_KEY"],
            storage_zone_name=values["BUNNY_STORAGE_ZONE_NAME"],
            bunny=BunnyStorageOptions(**options),
        )
