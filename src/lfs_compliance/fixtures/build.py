"""Fixture construction for a compliance run.

Exactly one fixture source is used per run: the two fixture files named in
the configuration, or a fresh upload of ``object_count`` objects followed by
the synthesis of the same number of missing identifiers.
"""

import random

from pydantic import ValidationError

from lfs_compliance.config import HarnessConfig
from lfs_compliance.exceptions import FixtureConstructionError
from lfs_compliance.fixtures.loader import load_fixture_files
from lfs_compliance.fixtures.synthesizer import missing_rng, synthesize_missing
from lfs_compliance.fixtures.uploader import RepoFactory, default_repo_factory, upload_fixtures
from lfs_compliance.models import FixtureSet
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.observability.metrics import record_fixture_objects
from lfs_compliance.transfer.base import UploadQueueFactory

logger = get_logger(__name__)


def build_test_data(
    count: int,
    queue_factory: UploadQueueFactory,
    repo_factory: RepoFactory = default_repo_factory,
    upload_rng: random.Random | None = None,
    verbose: bool = False,
) -> FixtureSet:
    """Upload ``count`` real objects and synthesize ``count`` missing ones.

    Raises:
        FixtureConstructionError: If uploading fails fatally or the two sets
            are not disjoint.
    """
    existing = upload_fixtures(
        count,
        upload_rng if upload_rng is not None else random.Random(),
        queue_factory,
        repo_factory=repo_factory,
        verbose=verbose,
    )

    missing = synthesize_missing(count, missing_rng(count))
    record_fixture_objects("synthesized", len(missing))

    try:
        return FixtureSet(existing=tuple(existing), missing=tuple(missing))
    except ValidationError as e:
        raise FixtureConstructionError(f"Generated fixtures are inconsistent: {e}", cause=e) from e


def prepare_fixtures(
    config: HarnessConfig,
    queue_factory: UploadQueueFactory,
    repo_factory: RepoFactory = default_repo_factory,
) -> FixtureSet:
    """Produce the fixtures for a run according to ``config``."""
    if config.file_mode:
        logger.info("fixtures.source", source="files")
        return load_fixture_files(config.exists_file, config.missing_file)  # type: ignore[arg-type]

    logger.info("fixtures.source", source="upload", objects=config.object_count)
    return build_test_data(
        config.object_count,
        queue_factory,
        repo_factory=repo_factory,
        verbose=config.verbose,
    )
