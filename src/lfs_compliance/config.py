"""Configuration module for the LFS compliance harness.

This module provides the HarnessConfig class describing where the server under
test lives, which fixture source to use, and how the harness logs, reports and
uploads.

Example:
    Direct API endpoint, fixtures built by uploading:

        >>> config = HarnessConfig(api_url="https://lfs.example.com/repo.git/info/lfs")
        >>> config.file_mode
        False

    Endpoint derived from a clone URL, fixtures read from files:

        >>> config = HarnessConfig(
        ...     clone_url="https://git.example.com/org/repo",
        ...     exists_file="oids-exist.txt",
        ...     missing_file="oids-missing.txt",
        ... )
        >>> config.file_mode
        True

    Loading from environment:

        >>> import os
        >>> os.environ['LFS_TEST_API_URL'] = 'https://lfs.example.com/info/lfs'
        >>> os.environ['LFS_TEST_OBJECT_COUNT'] = '20'
        >>> config = HarnessConfig.from_env()
"""

import os
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from lfs_compliance.exceptions import ConfigurationError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class HarnessConfig(BaseModel):
    """Configuration for a compliance run.

    Attributes:
        api_url: Base URL of the LFS API. Mutually exclusive with clone_url.
        clone_url: Repository clone URL from which the API URL is derived.
            Mutually exclusive with api_url.
        exists_file: Fixture file listing objects present on the server.
            Supplied together with missing_file to enable file mode.
        missing_file: Fixture file listing objects absent from the server.
        object_count: Number of objects uploaded and synthesized when fixtures
            are built rather than read from files. Between 0 and 10000.
            Default is 50.
        concurrent_transfers: Maximum number of uploads in flight. Between 1
            and 64. Default is 8.
        access_token: Optional bearer token sent with every API request.
        timeout_seconds: HTTP timeout per request. Default is 30 seconds.
        line_length: Column width of the runner's status lines. Default is 70.
        verbose: Passed to the upload queue to log each transfer.
        log_level: Log level for the structured logger. Default is WARNING.
        json_logs: Emit JSON logs instead of console-formatted ones.
        metrics_file: If set, Prometheus metrics are written here after the run.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    api_url: str | None = Field(default=None, description="URL of the LFS API")
    clone_url: str | None = Field(
        default=None, description="Clone URL from which to find the LFS API"
    )
    exists_file: str | None = Field(
        default=None, description="File listing oids known to exist on the server"
    )
    missing_file: str | None = Field(
        default=None, description="File listing oids known to be missing from the server"
    )
    object_count: int = Field(
        default=50,
        description="Objects to upload and synthesize when building fixtures (0-10000)",
    )
    concurrent_transfers: int = Field(
        default=8,
        description="Maximum number of concurrent uploads (1-64)",
    )
    access_token: str | None = Field(
        default=None, description="Bearer token for the LFS API"
    )
    timeout_seconds: float = Field(default=30.0, description="HTTP timeout per request")
    line_length: int = Field(default=70, description="Width of runner status lines")
    verbose: bool = Field(default=False, description="Log every transfer")
    log_level: str = Field(default="WARNING", description="Structured log level")
    json_logs: bool = Field(default=False, description="Emit JSON logs")
    metrics_file: str | None = Field(
        default=None, description="Path to write Prometheus metrics to"
    )

    model_config = {"frozen": True}

    @field_validator("api_url", "clone_url", "exists_file", "missing_file", "access_token", "metrics_file")
    @classmethod
    def validate_optional_text(cls, v: str | None) -> str | None:
        """Treat blank strings as unset.

        Example:
            >>> HarnessConfig(api_url="  ", clone_url="https://x/repo").api_url is None
            True
        """
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("object_count")
    @classmethod
    def validate_object_count(cls, v: int) -> int:
        if not (0 <= v <= 10000):
            raise ValueError(f"object_count must be between 0 and 10000, got {v}")
        return v

    @field_validator("concurrent_transfers")
    @classmethod
    def validate_concurrent_transfers(cls, v: int) -> int:
        if not (1 <= v <= 64):
            raise ValueError(f"concurrent_transfers must be between 1 and 64, got {v}")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}")
        return v

    @field_validator("line_length")
    @classmethod
    def validate_line_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"line_length must be >= 1, got {v}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Normalize the log level to uppercase and check it is known.

        Example:
            >>> HarnessConfig(api_url="https://x", log_level="debug").log_level
            'DEBUG'
        """
        if not isinstance(v, str):
            raise ValueError("log_level must be a string")
        level = v.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Valid levels are: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return level

    @model_validator(mode="after")
    def validate_sources(self) -> "HarnessConfig":
        """Require exactly one endpoint source and both-or-neither fixture files.

        Raises:
            ValueError: If the endpoint or fixture file settings are inconsistent.
        """
        if (self.api_url is None) == (self.clone_url is None):
            raise ValueError("Must supply either --url or --clone (and not both)")
        if (self.exists_file is None) != (self.missing_file is None):
            raise ValueError(
                "Must supply either no file arguments or both the exists AND missing file"
            )
        return self

    @property
    def file_mode(self) -> bool:
        """True when fixtures are read from files instead of built."""
        return self.exists_file is not None

    @classmethod
    def from_env(
        cls,
        prefix: str = "LFS_TEST_",
        overrides: dict[str, Any] | None = None,
    ) -> "HarnessConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, e.g.
        ``LFS_TEST_API_URL`` or ``LFS_TEST_CONCURRENT_TRANSFERS``. Values in
        ``overrides`` that are not None take precedence over the environment.

        Args:
            prefix: Prefix for environment variable names. Default is "LFS_TEST_".
            overrides: Explicit values, typically from the command line.

        Returns:
            HarnessConfig instance.

        Raises:
            ConfigurationError: If the combined settings are invalid.

        Example:
            >>> import os
            >>> os.environ['LFS_TEST_CLONE_URL'] = 'https://git.example.com/repo'
            >>> config = HarnessConfig.from_env(overrides={"object_count": 10})
            >>> config.object_count
            10
        """
        config_dict: dict[str, Any] = {}

        for field_name in cls.model_fields:
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is not None:
                config_dict[field_name] = env_value

        if overrides:
            config_dict.update({k: v for k, v in overrides.items() if v is not None})

        return cls.load(config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "HarnessConfig":
        """Create configuration from a dictionary.

        Raises:
            ConfigurationError: If the dictionary contains invalid values.
        """
        return cls.load(config_dict)

    @classmethod
    def load(cls, config_dict: dict[str, Any]) -> "HarnessConfig":
        """Validate ``config_dict`` and convert validation failures to ConfigurationError."""
        try:
            return cls(**config_dict)
        except ValidationError as e:
            messages = []
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                text = error["msg"].removeprefix("Value error, ")
                messages.append(f"{location}: {text}" if location else text)
            raise ConfigurationError("; ".join(messages)) from e
