"""
Pytest configuration and shared fixtures for lfs_compliance tests.

The fake server below speaks enough of the Git LFS batch API to build
fixtures against and to run the built-in checks. Switches on the server make
it misbehave in specific ways so tests can drive failure paths.
"""

import hashlib
from collections.abc import Callable, Iterator

import httpx
import pytest
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from lfs_compliance.checks.client import LfsApiClient
from lfs_compliance.config import HarnessConfig
from lfs_compliance.endpoint import Endpoint
from lfs_compliance.models import TestObject
from lfs_compliance.observability.logging import configure_logging
from lfs_compliance.transfer.base import UploadQueueFactory
from lfs_compliance.transfer.http import http_queue_factory

BASE_URL = "http://lfs.test"
API_PATH = "/org/repo.git/info/lfs"
LFS_MEDIA_TYPE = "application/vnd.git-lfs+json"


class FakeLfsServer:
    """In-memory Git LFS server.

    Attributes:
        objects: Stored content by oid.
        batch_requests: Every batch request body received, in order.
        reject_uploads: Answer every PUT with HTTP 500.
        batch_status: If set, every batch request gets this status and no body.
        offer_download_for_missing: Hand out download actions for absent
            objects instead of a 404 error (non-compliant).
        offer_upload_for_existing: Hand out upload actions for objects already
            stored (non-compliant).
        object_errors: Per-object errors to return from upload batches.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.api_url = f"{base_url}{API_PATH}"
        self.objects: dict[str, bytes] = {}
        self.batch_requests: list[dict] = []
        self.reject_uploads = False
        self.batch_status: int | None = None
        self.offer_download_for_missing = False
        self.offer_upload_for_existing = False
        self.object_errors: dict[str, dict] = {}
        self.app = self._build_app()

    def store(self, content: bytes) -> TestObject:
        oid = hashlib.sha256(content).hexdigest()
        self.objects[oid] = content
        return TestObject(oid=oid, size=len(content))

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post(f"{API_PATH}/objects/batch")
        async def batch(request: Request) -> Response:
            body = await request.json()
            self.batch_requests.append(body)
            if self.batch_status is not None:
                return Response(status_code=self.batch_status)

            operation = body["operation"]
            objects = [self._batch_object(operation, obj) for obj in body["objects"]]
            return JSONResponse(
                {"transfer": "basic", "objects": objects},
                media_type=LFS_MEDIA_TYPE,
            )

        @app.put("/storage/{oid}")
        async def upload(oid: str, request: Request) -> Response:
            if self.reject_uploads:
                return Response(status_code=500)
            content = await request.body()
            if hashlib.sha256(content).hexdigest() != oid:
                return Response(status_code=422)
            self.objects[oid] = content
            return Response(status_code=200)

        @app.get("/storage/{oid}")
        async def download(oid: str) -> Response:
            if oid not in self.objects:
                return Response(status_code=404)
            return Response(content=self.objects[oid], media_type="application/octet-stream")

        @app.post("/verify")
        async def verify(request: Request) -> Response:
            body = await request.json()
            stored = self.objects.get(body["oid"])
            if stored is None or len(stored) != body["size"]:
                return Response(status_code=404)
            return Response(status_code=200)

        return app

    def _batch_object(self, operation: str, obj: dict) -> dict:
        oid, size = obj["oid"], obj["size"]
        result: dict = {"oid": oid, "size": size}
        present = oid in self.objects

        if operation == "upload":
            if oid in self.object_errors:
                result["error"] = self.object_errors[oid]
            elif not present or self.offer_upload_for_existing:
                result["actions"] = {
                    "upload": {
                        "href": f"{self.base_url}/storage/{oid}",
                        "header": {"X-Upload-Token": "fake"},
                    },
                    "verify": {"href": f"{self.base_url}/verify"},
                }
            return result

        if present or self.offer_download_for_missing:
            result["actions"] = {"download": {"href": f"{self.base_url}/storage/{oid}"}}
        else:
            result["error"] = {"code": 404, "message": "Object does not exist"}
        return result


@pytest.fixture(autouse=True, scope="session")
def quiet_logging() -> None:
    """Keep structured log output out of test output."""
    configure_logging(level="CRITICAL")


@pytest.fixture
def lfs_server() -> FakeLfsServer:
    """Provide a fresh, empty fake LFS server."""
    return FakeLfsServer()


@pytest.fixture
def endpoint(lfs_server: FakeLfsServer) -> Endpoint:
    return Endpoint(url=lfs_server.api_url)


@pytest.fixture
def harness_config(lfs_server: FakeLfsServer) -> HarnessConfig:
    """Upload-mode configuration pointing at the fake server."""
    return HarnessConfig(api_url=lfs_server.api_url, object_count=6, concurrent_transfers=2)


@pytest.fixture
def sync_client(lfs_server: FakeLfsServer) -> Iterator[TestClient]:
    client = TestClient(lfs_server.app, base_url=lfs_server.base_url)
    yield client
    client.close()


@pytest.fixture
def async_client_factory(lfs_server: FakeLfsServer) -> Callable[[], httpx.AsyncClient]:
    """Build AsyncClients routed into the fake server's ASGI app."""

    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=lfs_server.app),
            base_url=lfs_server.base_url,
        )

    return factory


@pytest.fixture
def api_client(endpoint: Endpoint, sync_client: TestClient) -> LfsApiClient:
    return LfsApiClient(endpoint, client=sync_client)


@pytest.fixture
def queue_factory(
    endpoint: Endpoint,
    harness_config: HarnessConfig,
    async_client_factory: Callable[[], httpx.AsyncClient],
) -> UploadQueueFactory:
    return http_queue_factory(endpoint, harness_config, client_factory=async_client_factory)
