"""Fixture uploader: real objects guaranteed present on the server.

Content is produced inside an ephemeral test repository so that every
identifier is the true hash of real bytes, then pushed through an upload queue.
Nothing here is a compliance check yet, but a broken upload path makes every
later check meaningless, so fatal transfer errors stop the run.

Steps:
1. Describe ``count`` files of pseudo-random size (50-249 bytes).
2. Commit them as a single change-set, yielding each file's oid and size.
3. Enqueue one uploadable per file on a queue sized for the batch.
4. Wait for the queue to drain.
5. Abort on any fatal error; log and ignore non-fatal ones.

The repository is entered as a context manager, so the working directory
change is undone and the directory deleted on every exit path.
"""

import random
from collections.abc import Callable

from lfs_compliance.exceptions import FixtureConstructionError, HarnessError
from lfs_compliance.fixtures.repo import TestRepo
from lfs_compliance.fixtures.synthesizer import random_object_size
from lfs_compliance.models import CommitInput, FileInput, TestObject
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.observability.metrics import record_fixture_objects
from lfs_compliance.transfer.base import UploadQueueFactory, new_uploadable

logger = get_logger(__name__)

RepoFactory = Callable[[random.Random], TestRepo]


def default_repo_factory(rng: random.Random) -> TestRepo:
    return TestRepo.create(rng=rng)


def upload_fixtures(
    count: int,
    rng: random.Random,
    queue_factory: UploadQueueFactory,
    repo_factory: RepoFactory = default_repo_factory,
    verbose: bool = False,
) -> list[TestObject]:
    """Create ``count`` objects and make sure the server holds them.

    Args:
        count: Number of objects to create.
        rng: Generator for sizes and content.
        queue_factory: Builds the upload queue from (count, total bytes, verbose).
        repo_factory: Builds the scratch repository.
        verbose: Passed to the queue.

    Returns:
        The uploaded objects in creation order.

    Raises:
        FixtureConstructionError: If the repository, the queue or any
            transfer fails fatally.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    commit = CommitInput()
    total_size = 0
    for i in range(count):
        size = random_object_size(rng)
        commit.files.append(FileInput(filename=f"file{i}.dat", size=size))
        total_size += size

    logger.info("fixtures.upload.started", objects=count, total_bytes=total_size)

    with repo_factory(rng) as repo:
        output = repo.add_commit(commit)

        try:
            queue = queue_factory(len(output.files), total_size, verbose)
        except HarnessError:
            raise
        except Exception as e:
            raise FixtureConstructionError(f"Unable to create upload queue: {e}", cause=e) from e

        existing: list[TestObject] = []
        for file_output in output.files:
            existing.append(TestObject(oid=file_output.oid, size=file_output.size))
            queue.add(new_uploadable(repo, file_output.oid, file_output.filename))
        queue.wait()

    tolerated = 0
    for error in queue.errors():
        if error.fatal:
            raise FixtureConstructionError(f"Fatal error setting up test data: {error}")
        tolerated += 1
        logger.warning("fixtures.upload.tolerated_error", oid=error.oid, error=error.message)

    record_fixture_objects("uploaded", len(existing))
    logger.info(
        "fixtures.upload.finished",
        objects=len(existing),
        total_bytes=total_size,
        tolerated_errors=tolerated,
    )
    return existing
