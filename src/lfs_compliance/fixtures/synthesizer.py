"""Synthesis of identifiers that no real content can have.

Missing-object fixtures need identifiers that were never uploaded anywhere.
They are produced as a hash chain: a running sha256 accumulator is fed one
pseudo-random byte per object, and the accumulator's digest after each byte
is the next identifier. The digests are distinct, well-formed and unrelated
to any file content.

The generator is seeded from the object count, so asking for the same number
of objects always yields the same identifiers and sizes.
"""

import hashlib
import random

from lfs_compliance.models import TestObject

MIN_OBJECT_SIZE = 50
OBJECT_SIZE_SPAN = 200


def random_object_size(rng: random.Random) -> int:
    """Draw a fixture size in the range 50-249 inclusive."""
    return rng.randrange(OBJECT_SIZE_SPAN) + MIN_OBJECT_SIZE


def missing_rng(count: int) -> random.Random:
    """Return a fresh generator seeded with ``count``."""
    return random.Random(count)


def synthesize_missing(count: int, rng: random.Random | None = None) -> list[TestObject]:
    """Generate ``count`` objects guaranteed absent from any server.

    Args:
        count: Number of objects to produce.
        rng: Generator to draw from. Defaults to ``missing_rng(count)``.

    Returns:
        Objects in generation order.

    Raises:
        ValueError: If count is negative.

    Examples:
        >>> first = synthesize_missing(3)
        >>> first == synthesize_missing(3)
        True
        >>> synthesize_missing(0)
        []
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    if rng is None:
        rng = missing_rng(count)

    running = hashlib.sha256()
    objects: list[TestObject] = []
    for _ in range(count):
        running.update(bytes([rng.randrange(256)]))
        # hexdigest() leaves the accumulator open for the next byte
        oid = running.hexdigest()
        objects.append(TestObject(oid=oid, size=random_object_size(rng)))
    return objects
