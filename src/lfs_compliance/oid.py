"""Content identifiers for Git LFS objects.

An object's identifier is the lowercase hex sha256 digest of its content.
This module computes identifiers for real content, checks identifier syntax,
and renders the pointer text Git LFS stores in place of large files.
"""

import hashlib
import re
from collections.abc import Iterable

OID_HEX_LENGTH = 64
OID_PATTERN = re.compile(r"^[a-f0-9]{64}$")

POINTER_VERSION = "https://git-lfs.github.com/spec/v1"


def compute_oid(data: bytes | Iterable[bytes]) -> str:
    """Compute the content identifier for a blob.

    Args:
        data: The content, either as bytes or as an iterable of chunks.

    Returns:
        Hexadecimal SHA-256 digest (64 characters)

    Examples:
        >>> compute_oid(b"")
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    digest = hashlib.sha256()
    if isinstance(data, (bytes, bytearray, memoryview)):
        digest.update(data)
    else:
        for chunk in data:
            digest.update(chunk)
    return digest.hexdigest()


def is_valid_oid(oid: str) -> bool:
    """Return True if ``oid`` is a syntactically valid sha256 identifier.

    Examples:
        >>> is_valid_oid("a" * 64)
        True
        >>> is_valid_oid("abc123")
        False
    """
    return bool(OID_PATTERN.match(oid))


def pointer_text(oid: str, size: int) -> str:
    """Render the Git LFS pointer file for an object.

    Examples:
        >>> print(pointer_text("a" * 64, 12), end="")
        version https://git-lfs.github.com/spec/v1
        oid sha256:aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa
        size 12
    """
    return f"version {POINTER_VERSION}\noid sha256:{oid}\nsize {size}\n"
