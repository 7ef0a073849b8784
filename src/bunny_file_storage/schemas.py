"""Schema of the Bunny Storage directory listing.

The listing payload comes from a remote service and is not trusted: every
field is optional, but a field that is present must have the expected type.
A single malformed entry fails the whole listing.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bunny_file_storage.exceptions import ResponseValidationError
from bunny_file_storage.protocols.file_storage import (
    DEFAULT_CONTENT_TYPE,
    FileKey,
    FileMetadataEntry,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# pydantic reads bare numbers in strings as unix timestamps
NUMERIC_RE = re.compile(r"\s*[+-]?[0-9]+(\.[0-9]*)?\s*")

EXPECTED_TYPES = {
    "IsDirectory": "boolean",
    "Path": "string",
    "ObjectName": "string",
    "ContentType": "string",
    "Length": "number",
    "LastChanged": "ISO-8601 date string",
}


def json_type_name(value: Any) -> str:
    """Name the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class BunnyListEntry(BaseModel):
    """One entry of a directory listing response."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    is_directory: bool | None = Field(default=None, alias="IsDirectory")
    path: str | None = Field(default=None, alias="Path")
    object_name: str | None = Field(default=None, alias="ObjectName")
    content_type: str | None = Field(default=None, alias="ContentType")
    length: int | float | None = Field(default=None, alias="Length")
    last_changed: datetime | None = Field(default=None, alias="LastChanged", strict=False)

    @field_validator("last_changed", mode="before")
    @classmethod
    def require_date_string(cls, value: Any) -> Any:
        """Only accept dates transmitted as strings."""
        if value is not None and (not isinstance(value, str) or NUMERIC_RE.fullmatch(value)):
            raise ValueError("expected an ISO-8601 date string")
        return value

    @property
    def key(self) -> str:
        return f"{self.path or ''}{self.object_name or ''}"

    @property
    def last_modified_ms(self) -> int:
        """Last change as milliseconds since the epoch.

        Bunny sends timestamps without an offset; they are UTC.
        """
        if self.last_changed is None:
            return 0
        changed = self.last_changed
        if changed.tzinfo is None:
            changed = changed.replace(tzinfo=timezone.utc)
        return (changed - EPOCH) // timedelta(milliseconds=1)

    def to_file_key(self) -> FileKey:
        return FileKey(key=self.key)

    def to_metadata(self) -> FileMetadataEntry:
        return FileMetadataEntry(
            key=self.key,
            name=self.object_name or "",
            last_modified=self.last_modified_ms,
            size=int(self.length or 0),
            type=self.content_type or DEFAULT_CONTENT_TYPE,
        )


def parse_list_entries(payload: Any) -> list[BunnyListEntry]:
    """Validate a decoded listing response body.

    Args:
        payload: The decoded JSON body

    Returns:
        All entries, directories included

    Raises:
        ResponseValidationError: If the body is not an array or any entry
            has a field of the wrong type
    """
    if not isinstance(payload, list):
        received = json_type_name(payload)
        raise ResponseValidationError(
            f"Expected listing response to be an array but received {received}",
            received_type=received,
        )

    entries = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            received = json_type_name(item)
            raise ResponseValidationError(
                f"Expected listing entry {index} to be an object but received {received}",
                received_type=received,
            )
        try:
            entries.append(BunnyListEntry.model_validate(item))
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else None
            value = error.get("input")
            received = json_type_name(value)
            expected = EXPECTED_TYPES.get(field or "", "a valid value")
            shown = f"{received} {value!r}" if isinstance(value, str) else received
            raise ResponseValidationError(
                f"Invalid listing entry {index}: expected '{field}' to be {expected} "
                f"but received {shown}",
                field=field,
                received_type=received,
            ) from e

    return entries
