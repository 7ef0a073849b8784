"""Bunny.net Storage file backend."""

from collections.abc import Mapping
from typing import Any

import httpx

from bunny_file_storage.config import BunnyStorageOptions
from bunny_file_storage.exceptions import (
    PreserveRootError,
    ResponseValidationError,
    TransportError,
    UnknownContentTypeError,
)
from bunny_file_storage.observability import (
    RequestContext,
    Timer,
    emit_counter,
    emit_timer,
    get_logger,
)
from bunny_file_storage.protocols.file_storage import (
    DEFAULT_CONTENT_TYPE,
    FileRecord,
    ListOptions,
    ListPage,
)
from bunny_file_storage.schemas import parse_list_entries
from bunny_file_storage.utils.crypto import generate_checksum
from bunny_file_storage.utils.keys import bunny_path, file_name_from_key, is_root_key
from bunny_file_storage.utils.listing import (
    normalize_prefix,
    paginate,
    resolve_list_options,
    validate_list_options,
)

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def is_json_content_type(content_type: str | None) -> bool:
    """Check whether a Content-Type header declares JSON."""
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == JSON_CONTENT_TYPE


class BunnyFileStorage:
    """File storage backed by a Bunny.net storage zone.

    Every operation issues exactly one HTTP request and nothing is retried.
    Non-success responses raise TransportError, except for 404 on get/has,
    which mean "not found".
    """

    def __init__(
        self,
        access_key: str,
        storage_zone_name: str,
        options: BunnyStorageOptions | Mapping[str, Any] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize Bunny file storage.

        Args:
            access_key: Storage zone password, doubles as the API key
            storage_zone_name: Name of the storage zone
            options: Base options, defaults are used for anything not given
            transport: Optional httpx transport for all requests
            **overrides: Individual option overrides (e.g. preserve_root=False)
        """
        if not access_key or not storage_zone_name:
            raise ValueError(
                "BunnyFileStorage requires access_key and storage_zone_name. "
                "Use 'local' backend for development."
            )

        if isinstance(options, BunnyStorageOptions):
            settings = options.model_dump()
        else:
            settings = dict(options or {})
        settings.update(overrides)

        self.access_key = access_key
        self.storage_zone_name = storage_zone_name
        self.config = BunnyStorageOptions(**settings)
        self._transport = transport

    def _default_headers(self) -> dict[str, str]:
        """Get headers sent with every request."""
        return {
            "AccessKey": self.access_key,
            "Accept": JSON_CONTENT_TYPE,
        }

    async def _request(
        self,
        method: str,
        key: str,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """Send one request for a key and return the fully read response."""
        path = bunny_path(self.storage_zone_name, key)

        async with RequestContext(storage_zone=self.storage_zone_name):
            with Timer() as timer:
                async with httpx.AsyncClient(
                    base_url=self.config.storage_endpoint_url,
                    transport=self._transport,
                ) as client:
                    response = await client.request(
                        method,
                        path,
                        headers={**self._default_headers(), **(headers or {})},
                        content=content,
                    )

            logger.debug(
                "Storage request completed",
                context={"method": method, "path": path, "status_code": response.status_code},
                duration_ms=timer.duration_ms,
            )
            emit_timer(
                "bunny_storage.request.duration",
                timer.duration_ms,
                {"method": method, "status_code": response.status_code},
            )

        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        """Raise TransportError for a non-success response."""
        if response.is_success:
            return

        body: Any = None
        if is_json_content_type(response.headers.get("Content-Type")):
            try:
                body = response.json()
            except ValueError:
                body = response.text

        error = TransportError(action, response.status_code, response.reason_phrase, body)
        logger.warning(
            "Storage request failed",
            context={
                "method": response.request.method,
                "path": response.request.url.path,
                "status_code": response.status_code,
            },
            error=error,
        )
        emit_counter(
            "bunny_storage.request.failed",
            {"method": response.request.method, "status_code": response.status_code},
        )
        raise error

    async def get(self, key: str) -> FileRecord | None:
        """Download a file.

        Returns:
            The file, or None if it does not exist

        Raises:
            TransportError: If the server answers with neither success nor 404
        """
        response = await self._request("GET", key)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "Download")

        return FileRecord(
            name=file_name_from_key(key),
            content=response.content,
            content_type=response.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE,
        )

    async def has(self, key: str) -> bool:
        """Check whether a file exists in the storage zone.

        Uses the DESCRIBE method, which returns the object's metadata
        without its content. It is undocumented but used by Bunny's own SDK.

        Raises:
            TransportError: If the server answers with neither success nor 404
        """
        response = await self._request("DESCRIBE", key)
        if response.status_code == 404:
            return False
        self._raise_for_status(response, "Existence check")
        return True

    async def put(self, key: str, file: FileRecord | bytes) -> FileRecord:
        """Upload a file and return it.

        The storage is remote, so there is no storage-backed record to hand
        back: the uploaded record itself is returned.

        Raises:
            TransportError: If the server answers with a non-success status
        """
        return await self._upload(key, file)

    async def set(self, key: str, file: FileRecord | bytes) -> None:
        """Upload a file.

        Raises:
            TransportError: If the server answers with a non-success status
        """
        await self._upload(key, file)

    async def remove(self, key: str) -> None:
        """Delete a file, or a directory together with everything in it.

        Raises:
            PreserveRootError: If preserve_root is enabled and key is the root
            TransportError: If the server answers with a non-success status,
                404 included
        """
        if self.config.preserve_root and is_root_key(key):
            raise PreserveRootError(
                'Denied deletion of root folder because "preserve_root" is enabled. '
                "You may disable this via the constructor options."
            )

        response = await self._request("DELETE", key)
        self._raise_for_status(response, "Deletion")

    async def _upload(self, key: str, file: FileRecord | bytes) -> FileRecord:
        """Shared implementation of put and set.

        The checksum is computed over the same bytes object that is sent.
        """
        if not isinstance(file, FileRecord):
            file = FileRecord(name=file_name_from_key(key), content=bytes(file))

        content = file.content
        headers = {"Content-Type": "application/octet-stream"}
        if self.config.generate_checksums:
            headers["Checksum"] = generate_checksum(content)

        response = await self._request("PUT", key, headers=headers, content=content)
        self._raise_for_status(response, "Upload")
        return file

    async def list(self, options: ListOptions | None = None, **kwargs: Any) -> ListPage:
        """List one page of the files in a directory.

        Bunny returns the whole directory at once, so paging happens here
        over the fetched listing. Directories are never returned.

        Args:
            options: Listing options
            **kwargs: Overrides for individual options (prefix, limit,
                cursor, include_metadata)

        Raises:
            InputValidationError: If limit or cursor is malformed. Checked
                before any request is sent.
            TransportError: If the server answers with a non-success status
            UnknownContentTypeError: If the response is not JSON
            ResponseValidationError: If the response has an unexpected shape
        """
        options = validate_list_options(resolve_list_options(options, **kwargs))

        response = await self._request("GET", normalize_prefix(options.prefix))
        self._raise_for_status(response, "Listing")

        content_type = response.headers.get("Content-Type")
        if not is_json_content_type(content_type):
            raise UnknownContentTypeError(content_type)

        try:
            payload = response.json()
        except ValueError as e:
            raise ResponseValidationError("Listing response is not valid JSON") from e

        entries = [entry for entry in parse_list_entries(payload) if not entry.is_directory]
        page, cursor = paginate(entries, options.limit, options.cursor)

        if options.include_metadata:
            files = [entry.to_metadata() for entry in page]
        else:
            files = [entry.to_file_key() for entry in page]

        return ListPage(files=files, cursor=cursor)
