"""Fixture construction for compliance runs.

This package produces the two object sets every compliance check receives:

- Synthesizer: identifiers that can never exist on any server
- Uploader: real objects pushed to the server through an upload queue
- Loader: fixed object lists read from files
- Repo: the scratch repository real objects are created in
"""

from lfs_compliance.fixtures.build import build_test_data, prepare_fixtures
from lfs_compliance.fixtures.loader import load_fixture_files, read_test_objects
from lfs_compliance.fixtures.repo import TestRepo
from lfs_compliance.fixtures.synthesizer import missing_rng, synthesize_missing
from lfs_compliance.fixtures.uploader import upload_fixtures

__all__ = [
    "build_test_data",
    "prepare_fixtures",
    "load_fixture_files",
    "read_test_objects",
    "TestRepo",
    "missing_rng",
    "synthesize_missing",
    "upload_fixtures",
]
