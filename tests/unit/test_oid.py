"""Unit tests for content identifiers."""

import hashlib

from hypothesis import given
from hypothesis import strategies as st

from lfs_compliance.oid import OID_HEX_LENGTH, compute_oid, is_valid_oid, pointer_text

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestComputeOid:
    def test_empty_content(self) -> None:
        assert compute_oid(b"") == EMPTY_SHA256

    def test_chunks_match_whole(self) -> None:
        assert compute_oid([b"hello ", b"world"]) == compute_oid(b"hello world")

    @given(st.binary(max_size=2048))
    def test_matches_hashlib(self, data: bytes) -> None:
        oid = compute_oid(data)
        assert oid == hashlib.sha256(data).hexdigest()
        assert len(oid) == OID_HEX_LENGTH
        assert is_valid_oid(oid)


class TestIsValidOid:
    def test_uppercase_rejected(self) -> None:
        assert not is_valid_oid("A" * 64)

    def test_wrong_length_rejected(self) -> None:
        assert not is_valid_oid("a" * 63)
        assert not is_valid_oid("a" * 65)

    def test_non_hex_rejected(self) -> None:
        assert not is_valid_oid("g" * 64)


class TestPointerText:
    def test_format(self) -> None:
        assert pointer_text(EMPTY_SHA256, 0) == (
            "version https://git-lfs.github.com/spec/v1\n"
            f"oid sha256:{EMPTY_SHA256}\n"
            "size 0\n"
        )
