"""Utility modules for the LFS compliance harness."""

from .headers import (
    LFS_MEDIA_TYPE,
    action_headers,
    lfs_request_headers,
    redact_headers,
)

__all__ = [
    "LFS_MEDIA_TYPE",
    "lfs_request_headers",
    "action_headers",
    "redact_headers",
]
