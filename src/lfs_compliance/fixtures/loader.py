"""Fixture files: fixed lists of existing and missing objects.

File mode skips uploading and synthesis altogether, for repeatable runs
against a server whose content is already known. Each file holds one
``<oid> <size>`` record per line. Parsing is deliberately lenient: blank lines
and lines without exactly two fields are skipped, and a size that does not
parse as a signed 64-bit integer (or is negative) becomes 0.
"""

from pydantic import ValidationError

from lfs_compliance.exceptions import FixtureConstructionError, FixtureIOError
from lfs_compliance.models import FixtureSet, TestObject
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.observability.metrics import record_fixture_objects

logger = get_logger(__name__)

INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)


def parse_size(text: str) -> int:
    """Parse a size field, falling back to 0.

    Examples:
        >>> parse_size("100")
        100
        >>> parse_size("notanumber")
        0
    """
    # int() accepts digit separators, a 64-bit size field does not
    if "_" in text:
        return 0
    try:
        value = int(text, 10)
    except ValueError:
        return 0
    if not (INT64_MIN <= value <= INT64_MAX) or value < 0:
        return 0
    return value


def parse_test_objects(lines: list[str]) -> list[TestObject]:
    """Parse fixture records from already-read lines."""
    objects: list[TestObject] = []
    for line in lines:
        fields = line.strip().split()
        if len(fields) != 2:
            continue
        objects.append(TestObject(oid=fields[0], size=parse_size(fields[1])))
    return objects


def read_test_objects(path: str) -> list[TestObject]:
    """Read fixture records from ``path`` in file order.

    Raises:
        FixtureIOError: If the file is missing or unreadable.
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise FixtureIOError(f"Error opening file {path}", path=path, cause=e) from e

    objects = parse_test_objects(lines)
    logger.debug("fixtures.file.read", path=path, objects=len(objects))
    return objects


def load_fixture_files(exists_path: str, missing_path: str) -> FixtureSet:
    """Load both fixture files into a FixtureSet.

    Raises:
        FixtureIOError: If either file cannot be read.
        FixtureConstructionError: If the files repeat an identifier or share one.
    """
    existing = read_test_objects(exists_path)
    missing = read_test_objects(missing_path)

    try:
        fixtures = FixtureSet(existing=tuple(existing), missing=tuple(missing))
    except ValidationError as e:
        raise FixtureConstructionError(f"Invalid fixture files: {e}", cause=e) from e

    record_fixture_objects("loaded_existing", len(existing))
    record_fixture_objects("loaded_missing", len(missing))
    logger.info(
        "fixtures.loaded",
        exists_file=exists_path,
        missing_file=missing_path,
        existing=len(existing),
        missing=len(missing),
    )
    return fixtures
