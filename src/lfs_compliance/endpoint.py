"""Git LFS API endpoint configuration.

The server under test is identified either by its LFS API base URL, or by a
repository clone URL from which the API URL is derived the way Git LFS does
it: ``<clone>.git/info/lfs``, or ``<clone>/info/lfs`` when the clone URL
already ends in ``.git``. SSH clone URLs (``git@host:org/repo`` and
``ssh://git@host/org/repo``) are mapped to HTTPS first.

Examples:
    >>> endpoint_from_clone_url("https://git.example.com/org/repo").url
    'https://git.example.com/org/repo.git/info/lfs'
    >>> endpoint_from_clone_url("git@git.example.com:org/repo.git").url
    'https://git.example.com/org/repo.git/info/lfs'
"""

import re
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, Field

from lfs_compliance.config import HarnessConfig
from lfs_compliance.exceptions import ConfigurationError

# user@host:path, but not a Windows drive letter or a URL with a scheme
_SCP_LIKE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>(?!//).+)$")


class Endpoint(BaseModel):
    """A resolved LFS API location.

    Attributes:
        url: API base URL, without a trailing slash.
    """

    url: str = Field(..., min_length=1)

    model_config = {"frozen": True}

    def object_url(self, *parts: str) -> str:
        """Join path segments onto the API base.

        Examples:
            >>> Endpoint(url="https://lfs.example.com/info/lfs").object_url("objects", "batch")
            'https://lfs.example.com/info/lfs/objects/batch'
        """
        return "/".join([self.url, *(part.strip("/") for part in parts)])


def endpoint_from_api_url(api_url: str) -> Endpoint:
    """Build an endpoint from a direct API URL."""
    url = api_url.strip().rstrip("/")
    if not urlsplit(url).scheme:
        raise ConfigurationError(f"API URL must be absolute: {api_url}")
    return Endpoint(url=url)


def endpoint_from_clone_url(clone_url: str) -> Endpoint:
    """Derive the API endpoint from a repository clone URL."""
    url = _ssh_to_https(clone_url.strip()).rstrip("/")
    if not urlsplit(url).scheme:
        raise ConfigurationError(f"Cannot derive an LFS endpoint from clone URL: {clone_url}")
    if url.endswith(".git"):
        return Endpoint(url=f"{url}/info/lfs")
    return Endpoint(url=f"{url}.git/info/lfs")


def resolve_endpoint(config: HarnessConfig) -> Endpoint:
    """Pick the endpoint source configured for this run.

    Raises:
        ConfigurationError: If neither or both sources are set.
    """
    if (config.api_url is None) == (config.clone_url is None):
        raise ConfigurationError("Must supply either --url or --clone (and not both)")
    if config.api_url is not None:
        return endpoint_from_api_url(config.api_url)
    return endpoint_from_clone_url(config.clone_url)  # type: ignore[arg-type]


def _ssh_to_https(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme in ("ssh", "git+ssh"):
        host = parts.hostname or ""
        return urlunsplit(("https", host, parts.path, "", ""))
    if parts.scheme:
        return url

    match = _SCP_LIKE.match(url)
    if match:
        return f"https://{match.group('host')}/{match.group('path').lstrip('/')}"
    return url
