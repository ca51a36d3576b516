"""Header utilities for talking to a Git LFS API.

This module provides functions for:
- Building the request headers the batch API expects
- Merging per-action headers handed out by the server
- Redacting credentials before headers are logged
"""

LFS_MEDIA_TYPE = "application/vnd.git-lfs+json"

# Header values that must never appear in logs
SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "x-amz-security-token",
}


def lfs_request_headers(access_token: str | None = None) -> dict[str, str]:
    """Build headers for a batch API request.

    Args:
        access_token: Optional bearer token

    Returns:
        Headers dictionary

    Example:
        >>> lfs_request_headers()
        {'Accept': 'application/vnd.git-lfs+json', 'Content-Type': 'application/vnd.git-lfs+json'}
    """
    headers = {
        "Accept": LFS_MEDIA_TYPE,
        "Content-Type": LFS_MEDIA_TYPE,
    }
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def action_headers(
    action: dict[str, object],
    content_type: str | None = None,
) -> dict[str, str]:
    """Headers to send when following a batch response action.

    The server's ``header`` map wins over the defaults, since it may carry
    signed values the storage backend checks.

    Example:
        >>> action_headers({"href": "https://s3/x", "header": {"X-Sig": "abc"}}, "application/octet-stream")
        {'Content-Type': 'application/octet-stream', 'X-Sig': 'abc'}
    """
    result: dict[str, str] = {}
    if content_type:
        result["Content-Type"] = content_type

    server_headers = action.get("header") or {}
    if isinstance(server_headers, dict):
        result.update({str(key): str(value) for key, value in server_headers.items()})

    return result


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` safe for logging.

    Example:
        >>> redact_headers({"Authorization": "Bearer abc", "Accept": "x"})
        {'Authorization': '<redacted>', 'Accept': 'x'}
    """
    return {
        key: "<redacted>" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }
