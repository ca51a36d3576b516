"""Upload queue backed by the Git LFS batch API.

The queue collects objects, then on ``wait()`` runs an asyncio event loop that:

1. POSTs the objects to ``<endpoint>/objects/batch`` with operation
   ``upload``, at most ``batch_size`` objects per request;
2. for every object the server hands an ``upload`` action, PUTs the content
   to the action's ``href``, at most ``concurrency`` transfers at a time;
3. POSTs ``{"oid", "size"}`` to the ``verify`` action when one is given.

Objects returned without actions are already on the server and need nothing.

Error classification:
    fatal      network errors, non-2xx batch responses, malformed batch
               responses or entries (actions that are not objects with an
               ``href``), objects missing from the response, unreadable local
               content, failed or unreachable upload and verify actions
    non-fatal  per-object ``error`` entries in the batch response

Examples:
    Uploading a handful of objects::

        queue = HttpUploadQueue(endpoint, count=2, total_size=300)
        queue.add(first)
        queue.add(second)
        queue.wait()
        for error in queue.errors():
            print(error.fatal, error)
"""

import asyncio
from collections.abc import Callable, Iterator
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from lfs_compliance.config import HarnessConfig
from lfs_compliance.endpoint import Endpoint
from lfs_compliance.models import TransferError
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.observability.metrics import record_transfer_error, record_uploaded_bytes
from lfs_compliance.transfer.base import Uploadable, UploadQueueFactory
from lfs_compliance.utils.headers import action_headers, lfs_request_headers, redact_headers

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 100

AsyncClientFactory = Callable[[], httpx.AsyncClient]


class TransferAction(BaseModel):
    """An action handed out in a batch response (``upload``, ``verify``)."""

    href: str = Field(..., min_length=1)
    header: dict[str, Any] = Field(default_factory=dict)


class UploadEntry(BaseModel):
    """The parts of one batch response object the upload path relies on.

    Entries that do not fit this shape are reported as fatal errors rather
    than followed.
    """

    oid: str
    actions: dict[str, TransferAction] | None = None
    error: Any = None


def _chunks(items: list[Uploadable], size: int) -> Iterator[list[Uploadable]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class HttpUploadQueue:
    """Concurrent uploader speaking the Git LFS batch protocol.

    Attributes:
        endpoint: LFS API the objects are pushed to.
        count: Number of objects the caller intends to add.
        total_size: Total bytes the caller intends to add.
        verbose: Log every transfer at info level.
        concurrency: Maximum number of uploads in flight.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        count: int,
        total_size: int,
        verbose: bool = False,
        *,
        concurrency: int = 8,
        access_token: str | None = None,
        timeout_seconds: float = 30.0,
        batch_size: int = DEFAULT_BATCH_SIZE,
        client_factory: AsyncClientFactory | None = None,
    ) -> None:
        if count < 0 or total_size < 0:
            raise ValueError("count and total_size must be >= 0")
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self.endpoint = endpoint
        self.count = count
        self.total_size = total_size
        self.verbose = verbose
        self.concurrency = concurrency
        self.batch_size = batch_size
        self._access_token = access_token
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True)
        )
        self._pending: list[Uploadable] = []
        self._errors: list[TransferError] = []
        self._drained = False

    def add(self, uploadable: Uploadable) -> None:
        if self._drained:
            raise RuntimeError("Cannot add to an upload queue that has already been drained")
        self._pending.append(uploadable)

    def wait(self) -> None:
        if self._drained:
            return
        self._drained = True

        if len(self._pending) != self.count:
            logger.debug(
                "transfer.queue.count_mismatch",
                expected=self.count,
                actual=len(self._pending),
            )
        if not self._pending:
            return

        logger.info(
            "transfer.queue.started",
            objects=len(self._pending),
            total_bytes=self.total_size,
            concurrency=self.concurrency,
        )
        asyncio.run(self._process(list(self._pending)))
        logger.info(
            "transfer.queue.drained",
            objects=len(self._pending),
            errors=len(self._errors),
        )

    def errors(self) -> list[TransferError]:
        return list(self._errors)

    async def _process(self, pending: list[Uploadable]) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)
        async with self._client_factory() as client:
            for chunk in _chunks(pending, self.batch_size):
                planned = await self._request_batch(client, chunk)
                await asyncio.gather(
                    *(
                        self._transfer(client, semaphore, uploadable, actions)
                        for uploadable, actions in planned
                    )
                )

    async def _request_batch(
        self,
        client: httpx.AsyncClient,
        chunk: list[Uploadable],
    ) -> list[tuple[Uploadable, dict[str, TransferAction]]]:
        """Ask the server what to do with ``chunk``.

        Returns the objects that need an upload, paired with their actions.
        """
        url = self.endpoint.object_url("objects", "batch")
        headers = lfs_request_headers(self._access_token)
        payload = {
            "operation": "upload",
            "transfers": ["basic"],
            "objects": [{"oid": u.oid, "size": u.size} for u in chunk],
        }
        logger.debug(
            "transfer.batch.request",
            url=url,
            objects=len(chunk),
            headers=redact_headers(headers),
        )

        try:
            response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self._record(TransferError(message=f"Batch request to {url} failed: {e}", fatal=True))
            return []

        if not response.is_success:
            self._record(
                TransferError(
                    message=f"Batch request to {url} failed: HTTP {response.status_code}",
                    fatal=True,
                )
            )
            return []

        try:
            body = response.json()
            returned = body["objects"]
            by_oid = {obj["oid"]: obj for obj in returned}
        except (ValueError, KeyError, TypeError) as e:
            self._record(TransferError(message=f"Malformed batch response from {url}: {e}", fatal=True))
            return []

        planned: list[tuple[Uploadable, dict[str, TransferAction]]] = []
        for uploadable in chunk:
            obj = by_oid.get(uploadable.oid)
            if obj is None:
                self._record(
                    TransferError(
                        oid=uploadable.oid,
                        message="Object missing from batch response",
                        fatal=True,
                    )
                )
                continue

            try:
                entry = UploadEntry.model_validate(obj)
            except ValidationError as e:
                self._record(
                    TransferError(
                        oid=uploadable.oid,
                        message=f"Malformed batch response entry: {e}",
                        fatal=True,
                    )
                )
                continue

            error = entry.error
            if error:
                if not isinstance(error, dict):
                    error = {"message": error}
                self._record(
                    TransferError(
                        oid=uploadable.oid,
                        message=f"Server reported error {error.get('code')}: {error.get('message')}",
                        fatal=False,
                    )
                )
                continue

            actions = entry.actions or {}
            if "upload" not in actions:
                logger.debug("transfer.object.present", oid=uploadable.oid)
                continue
            planned.append((uploadable, actions))

        return planned

    async def _transfer(
        self,
        client: httpx.AsyncClient,
        semaphore: asyncio.Semaphore,
        uploadable: Uploadable,
        actions: dict[str, TransferAction],
    ) -> None:
        async with semaphore:
            try:
                content = uploadable.read()
            except OSError as e:
                self._record(
                    TransferError(oid=uploadable.oid, message=f"Cannot read local content: {e}", fatal=True)
                )
                return

            upload = actions["upload"]
            try:
                response = await client.put(
                    upload.href,
                    content=content,
                    headers=action_headers(upload.model_dump(), "application/octet-stream"),
                )
                if not response.is_success:
                    self._record(
                        TransferError(
                            oid=uploadable.oid,
                            message=f"Upload failed: HTTP {response.status_code}",
                            fatal=True,
                        )
                    )
                    return

                verify = actions.get("verify")
                if verify is not None:
                    headers = lfs_request_headers()
                    headers.update(action_headers(verify.model_dump()))
                    response = await client.post(
                        verify.href,
                        json={"oid": uploadable.oid, "size": uploadable.size},
                        headers=headers,
                    )
                    if not response.is_success:
                        self._record(
                            TransferError(
                                oid=uploadable.oid,
                                message=f"Verify failed: HTTP {response.status_code}",
                                fatal=True,
                            )
                        )
                        return
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                self._record(TransferError(oid=uploadable.oid, message=f"Upload failed: {e}", fatal=True))
                return

        record_uploaded_bytes(uploadable.size)
        if self.verbose:
            logger.info("transfer.object.uploaded", oid=uploadable.oid, name=uploadable.name, size=uploadable.size)

    def _record(self, error: TransferError) -> None:
        self._errors.append(error)
        record_transfer_error(error.fatal)
        if error.fatal:
            logger.error("transfer.failed", oid=error.oid, error=error.message)
        else:
            logger.warning("transfer.object.error", oid=error.oid, error=error.message)


def http_queue_factory(
    endpoint: Endpoint,
    config: HarnessConfig,
    client_factory: AsyncClientFactory | None = None,
) -> UploadQueueFactory:
    """Bind endpoint and transfer settings into an UploadQueueFactory."""

    def factory(count: int, total_size: int, verbose: bool) -> HttpUploadQueue:
        return HttpUploadQueue(
            endpoint,
            count,
            total_size,
            verbose,
            concurrency=config.concurrent_transfers,
            access_token=config.access_token,
            timeout_seconds=config.timeout_seconds,
            client_factory=client_factory,
        )

    return factory
