"""Bunny file storage exceptions."""

from typing import Any


class FileStorageError(Exception):
    """Base exception for bunny-file-storage."""

    pass


class ConfigError(FileStorageError):
    """Configuration error."""

    pass


class TransportError(FileStorageError):
    """The storage API answered with a non-success status code.

    Attributes:
        status_code: HTTP status code of the response
        status_text: HTTP reason phrase of the response
        body: Parsed JSON error body, if the response declared JSON
    """

    def __init__(
        self,
        action: str,
        status_code: int,
        status_text: str,
        body: Any | None = None,
    ) -> None:
        super().__init__(f"{action} failed with status code: {status_code} {status_text}")
        self.action = action
        self.status_code = status_code
        self.status_text = status_text
        self.body = body


class PreserveRootError(FileStorageError):
    """Deletion of the storage zone root was refused."""

    pass


class UnknownContentTypeError(FileStorageError):
    """A listing response did not declare a JSON content type."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            f"Expected content type 'application/json' but received '{content_type}'"
        )
        self.content_type = content_type


class ResponseValidationError(FileStorageError):
    """A listing response did not match the expected shape."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        received_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.received_type = received_type


class InputValidationError(FileStorageError):
    """Caller supplied list options are malformed."""

    pass


class KeyNotFoundError(FileStorageError):
    """Storage key does not exist."""

    pass
