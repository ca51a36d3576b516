"""Synchronous Git LFS batch API client used by compliance checks.

The client posts batch requests and parses the response into models. Any
response a compliant server could not have sent (non-2xx status, a body that
is not JSON, a body that does not look like a batch response) raises
``ComplianceFailure``, so checks can call it without their own error handling.
"""

from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from lfs_compliance.config import HarnessConfig
from lfs_compliance.endpoint import Endpoint
from lfs_compliance.exceptions import ComplianceFailure
from lfs_compliance.models import TestObject
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.utils.headers import lfs_request_headers

logger = get_logger(__name__)

MAX_DETAIL_CHARS = 500


class BatchObjectError(BaseModel):
    code: int | None = None
    message: str = ""


class BatchObject(BaseModel):
    """One entry of a batch response."""

    oid: str
    size: int | None = None
    actions: dict[str, dict[str, Any]] = Field(default_factory=dict)
    error: BatchObjectError | None = None

    model_config = {"extra": "allow"}

    def has_action(self, name: str) -> bool:
        return name in self.actions


class BatchResponse(BaseModel):
    transfer: str | None = None
    objects: list[BatchObject] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    def by_oid(self) -> dict[str, BatchObject]:
        return {obj.oid: obj for obj in self.objects}


class LfsApiClient:
    """Thin wrapper over an httpx.Client bound to one LFS endpoint.

    Attributes:
        endpoint: API the requests go to.
        client: Underlying HTTP client. Owned (and closed) by this object
            only when it created it.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        client: httpx.Client | None = None,
        access_token: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
        self._headers = lfs_request_headers(access_token)

    @classmethod
    def from_config(cls, endpoint: Endpoint, config: HarnessConfig) -> "LfsApiClient":
        return cls(endpoint, access_token=config.access_token, timeout_seconds=config.timeout_seconds)

    def batch(self, operation: str, objects: list[TestObject] | tuple[TestObject, ...]) -> BatchResponse:
        """POST a batch request for ``objects``.

        Raises:
            ComplianceFailure: If the server's answer is not a valid batch response.
        """
        url = self.endpoint.object_url("objects", "batch")
        payload = {
            "operation": operation,
            "transfers": ["basic"],
            "objects": [obj.as_batch_object() for obj in objects],
        }

        try:
            response = self.client.post(url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise ComplianceFailure(f"Batch {operation} request to {url} failed: {e}") from e

        logger.debug(
            "checks.batch.response",
            operation=operation,
            objects=len(objects),
            status_code=response.status_code,
        )

        if not response.is_success:
            raise ComplianceFailure(
                f"Batch {operation} request returned HTTP {response.status_code}",
                detail=response.text[:MAX_DETAIL_CHARS] or None,
            )

        try:
            return BatchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ComplianceFailure(
                f"Invalid batch {operation} response: {e}",
                detail=response.text[:MAX_DETAIL_CHARS] or None,
            ) from e

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "LfsApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
