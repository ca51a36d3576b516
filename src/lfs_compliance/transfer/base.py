"""Upload queue protocol for fixture construction.

This module defines the interface the fixture uploader drives to push content
to the server under test, and the ``Uploadable`` unit of work it enqueues.

A queue is constructed for one batch with the expected object count and total
byte volume. The uploader adds every object, waits for the queue to drain and
then inspects the accumulated errors. How the queue moves bytes, and how many
transfers it runs at once, is entirely its own business: callers observe only
the final state.

Examples:
    Driving a queue::

        queue = queue_factory(len(outputs), total_size, False)
        for output in outputs:
            queue.add(new_uploadable(repo, output.oid, output.filename))
        queue.wait()

        fatal = [error for error in queue.errors() if error.fatal]

Contract:
    All UploadQueue implementations MUST guarantee:

    1. **Blocking drain**: wait() returns only when every added object has
       either been transferred or produced a TransferError.

    2. **Classified errors**: every failure is reported as a TransferError
       whose ``fatal`` flag says whether the fixtures can still be trusted.
       Failures are never raised out of wait().

    3. **Single use**: add() after wait() is an error.
"""

import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from lfs_compliance.exceptions import FixtureConstructionError
from lfs_compliance.models import TransferError

if TYPE_CHECKING:
    from lfs_compliance.fixtures.repo import TestRepo


class Uploadable(BaseModel):
    """A locally stored object ready to be pushed.

    Attributes:
        oid: Content identifier.
        size: Content length in bytes.
        path: Local file holding the content.
        name: Display name used in logs.
    """

    oid: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    path: str
    name: str = ""

    model_config = {"frozen": True}

    def read(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


def new_uploadable(repo: "TestRepo", oid: str, name: str) -> Uploadable:
    """Locate ``oid`` in the repository's object store.

    Raises:
        FixtureConstructionError: If the object was never stored.
    """
    path = repo.object_path(oid)
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise FixtureConstructionError(f"Object {oid} ({name}) not found in local storage", cause=e) from e
    return Uploadable(oid=oid, size=size, path=path, name=name)


@runtime_checkable
class UploadQueue(Protocol):
    """Protocol for a transfer engine that pushes objects to the server."""

    def add(self, uploadable: Uploadable) -> None:
        """Enqueue an object for upload."""
        ...

    def wait(self) -> None:
        """Block until every enqueued object has been processed."""
        ...

    def errors(self) -> list[TransferError]:
        """Errors accumulated so far, fatal and non-fatal."""
        ...


# (object count, total bytes, verbose) -> queue
UploadQueueFactory = Callable[[int, int, bool], UploadQueue]
