"""Pytest configuration and fixtures."""

import httpx
import pytest

from bunny_file_storage.backends.files.bunny import BunnyFileStorage


class StubBunnyServer:
    """Stands in for the Bunny Storage API.

    Records every request and answers with queued responses (200 with an
    empty body once the queue is exhausted).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def respond(self, status_code: int = 200, **kwargs) -> None:
        """Queue the response for the next request."""
        self.responses.append(httpx.Response(status_code, **kwargs))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def bunny_server() -> StubBunnyServer:
    """Create a stub Bunny Storage API."""
    return StubBunnyServer()


@pytest.fixture
def bunny_storage(bunny_server: StubBunnyServer) -> BunnyFileStorage:
    """Create a Bunny file storage talking to the stub API."""
    return BunnyFileStorage("access-key", "storage-zone", transport=bunny_server.transport)


@pytest.fixture
def listing_payload() -> list[dict]:
    """Sample directory listing as returned by Bunny."""
    return [
        {
            "Guid": "0b9e6ef1-6f6b-4c4e-9a57-1a0d8a8c2f11",
            "StorageZoneName": "storage-zone",
            "Path": "/storage-zone/docs/",
            "ObjectName": "archive",
            "Length": 0,
            "LastChanged": "2026-02-04T10:00:00.000",
            "IsDirectory": True,
            "ContentType": "",
        },
        {
            "Guid": "7d1b3e4a-0c58-4f5e-8c1b-3b8b1f2d9e01",
            "StorageZoneName": "storage-zone",
            "Path": "/storage-zone/docs/",
            "ObjectName": "a.txt",
            "Length": 5,
            "LastChanged": "2026-02-05T12:30:00.000",
            "IsDirectory": False,
            "ContentType": "text/plain",
        },
        {
            "Guid": "2f6a4d0e-3c9b-4b6e-a0c7-5e3d2a1b0c99",
            "StorageZoneName": "storage-zone",
            "Path": "/storage-zone/docs/",
            "ObjectName": "b.json",
            "Length": 1024,
            "LastChanged": "2026-02-05T12:31:00.500",
            "IsDirectory": False,
            "ContentType": "application/json",
        },
        {
            "Guid": "9c8b7a6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d",
            "StorageZoneName": "storage-zone",
            "Path": "/storage-zone/docs/",
            "ObjectName": "c.png",
            "Length": 2048,
            "LastChanged": "2026-02-05T12:32:00.000",
            "IsDirectory": False,
            "ContentType": "image/png",
        },
    ]


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "backend": "bunny",
        "access_key": "test-access-key",
        "storage_zone_name": "test-zone",
        "bunny": {
            "storage_endpoint_url": "https://se.storage.bunnycdn.com",
            "generate_checksums": False,
        },
    }
