"""Custom exceptions for the LFS compliance harness.

This module defines the exception hierarchy used throughout the harness to
signal conditions that stop a run before any test executes (configuration,
fixture I/O and fixture construction failures), registry misuse, and the
failure raised by individual compliance checks.

Only ``ComplianceFailure`` is local to a single test: the runner records it
as a failed outcome and moves on. Every other ``HarnessError`` is fatal and is
turned into a non-zero exit status by the command line entry point.

Examples:
    Raising from a compliance check::

        from lfs_compliance.exceptions import ComplianceFailure

        def check(existing, missing):
            response = api.batch("download", missing)
            if response.objects[0].error is None:
                raise ComplianceFailure("expected a 404 error for a missing object")

    Handling a fatal harness error::

        from lfs_compliance.exceptions import HarnessError

        try:
            report = run_harness(config)
        except HarnessError as e:
            print(e.message, file=sys.stderr)
            raise SystemExit(2)
"""


class HarnessError(Exception):
    """Base exception for all harness errors.

    All exceptions raised by the harness inherit from this base class, allowing
    callers to catch every harness-specific error with a single except clause.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(HarnessError):
    """The harness configuration is unusable.

    Raised when no endpoint source is given, when both ``--url`` and
    ``--clone`` are given, when only one of the two fixture files is supplied,
    or when a setting fails validation. No fixtures are built.
    """


class FixtureIOError(HarnessError):
    """A fixture file could not be opened or read.

    Attributes:
        message: Human-readable error description.
        path: Path of the fixture file that failed.
        cause: The underlying OS error, if any.

    Examples:
        Raising a fixture I/O error::

            try:
                handle = open(path, encoding="utf-8")
            except OSError as e:
                raise FixtureIOError(f"Error opening file {path}", path=path, cause=e) from e
    """

    def __init__(self, message: str, path: str, cause: Exception | None = None) -> None:
        """Initialize the fixture I/O error with details.

        Args:
            message: Human-readable error description.
            path: Path of the fixture file that failed.
            cause: The underlying OS error, if any.
        """
        super().__init__(message)
        self.path = path
        self.cause = cause


class FixtureConstructionError(HarnessError):
    """Fixtures could not be brought into a known, correct state.

    This covers scaffolding commit failures, upload queue construction
    failures, fatal transfer errors reported by the upload queue, and
    violations of the fixture-set invariants (duplicate identifiers, or an
    identifier present in both the existing and missing sets).

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the construction error with details.

        Args:
            message: Human-readable error description.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.cause = cause


class RegistryError(HarnessError):
    """A test registry was used incorrectly.

    Raised for duplicate test names and for registration after the registry
    has been frozen by the runner.
    """


class ComplianceFailure(HarnessError):
    """A compliance check found the server out of protocol.

    Attributes:
        message: Human-readable error description.
        detail: Optional extra context, such as the offending response body.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        """Initialize the failure.

        Args:
            message: Human-readable error description.
            detail: Optional extra context shown below the message.
        """
        super().__init__(message)
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n{self.detail}"
        return self.message
