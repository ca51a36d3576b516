"""Core type definitions for the LFS compliance harness.

This module provides the data structures shared by fixture construction, the
upload queue and the test runner: content-addressed test objects, the pair of
existing/missing fixture sets, test cases and their results, transfer errors
and the inputs and outputs of the test repository scaffolding.

Examples:
    Building a fixture set::

        from lfs_compliance.models import FixtureSet, TestObject

        fixtures = FixtureSet(
            existing=(TestObject(oid="a" * 64, size=120),),
            missing=(TestObject(oid="b" * 64, size=75),),
        )

    Recording a failed upload::

        error = TransferError(oid="a" * 64, message="HTTP 500 from upload action", fatal=True)
"""

from collections.abc import Callable, Sequence
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class TestObject(BaseModel):
    """A single content-addressed fixture.

    The identifier is not checked against the sha256 syntax here: file mode
    accepts whatever identifiers the operator wrote down. Use
    ``lfs_compliance.oid.is_valid_oid`` where the syntax matters.

    Attributes:
        oid: Content identifier (hex digest).
        size: Byte length of the real or notional content.
    """

    __test__ = False

    oid: str = Field(
        ...,
        description="Content identifier (hex digest)",
        min_length=1,
        examples=["4d7a214614ab2935c943f9e0ff69d22eadbb8f32b1258daaa5e2ca24d17e2393"],
    )
    size: int = Field(
        ...,
        description="Byte length of the object",
        ge=0,
        examples=[50, 249],
    )

    model_config = {"frozen": True}

    def as_batch_object(self) -> dict[str, str | int]:
        """Return the object in Git LFS batch request form."""
        return {"oid": self.oid, "size": self.size}


class FixtureSet(BaseModel):
    """Objects known to be present on the server and objects known to be absent.

    Both sequences are stored as tuples and the model is frozen, so a fixture
    set handed to every test case cannot be altered by any of them.

    Attributes:
        existing: Objects guaranteed present on the server.
        missing: Objects guaranteed absent from the server.

    Raises:
        ValidationError: If an identifier repeats within a set or appears in
            both sets.
    """

    existing: tuple[TestObject, ...] = Field(default=())
    missing: tuple[TestObject, ...] = Field(default=())

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_identifiers(self) -> "FixtureSet":
        """Check uniqueness within each set and disjointness between them."""
        for label, objects in (("existing", self.existing), ("missing", self.missing)):
            seen: set[str] = set()
            for obj in objects:
                if obj.oid in seen:
                    raise ValueError(f"Duplicate oid {obj.oid} in {label} fixtures")
                seen.add(obj.oid)

        overlap = {obj.oid for obj in self.existing} & {obj.oid for obj in self.missing}
        if overlap:
            raise ValueError(
                f"Fixture sets are not disjoint: {', '.join(sorted(overlap))}"
            )
        return self


TestFunc = Callable[[Sequence[TestObject], Sequence[TestObject]], None]


class ServerTest(BaseModel):
    """A named compliance check.

    ``func`` receives the existing and missing objects, returns on success
    and raises on failure.
    """

    __test__ = False

    name: str = Field(..., min_length=1)
    func: TestFunc

    model_config = {"frozen": True}


class TestOutcome(str, Enum):
    """Result of running one compliance check."""

    __test__ = False

    PASSED = "PASSED"
    FAILED = "FAILED"


class TestResult(BaseModel):
    """Outcome of a single check as observed by the runner.

    Attributes:
        name: Registered test name.
        outcome: PASSED or FAILED.
        error: Descriptive error text when FAILED, None otherwise.
        duration_ms: Wall-clock time spent inside the check.
    """

    __test__ = False

    name: str
    outcome: TestOutcome
    error: str | None = None
    duration_ms: int = Field(default=0, ge=0)

    @property
    def passed(self) -> bool:
        return self.outcome is TestOutcome.PASSED


class RunReport(BaseModel):
    """Ordered results of a full run."""

    results: list[TestResult] = Field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def success(self) -> bool:
        return self.failed == 0


class TransferError(BaseModel):
    """An error accumulated by an upload queue.

    The ``fatal`` flag is the classification made by the queue: fatal errors
    mean the fixtures cannot be trusted and the run must stop, non-fatal ones
    (for example a per-object error the server reports for an object it
    already holds) are tolerated.

    Attributes:
        oid: Object the error concerns, or None for batch-level failures.
        message: Human-readable error description.
        fatal: Whether the error invalidates fixture construction.
    """

    oid: str | None = None
    message: str
    fatal: bool = False

    model_config = {"frozen": True}

    def __str__(self) -> str:
        if self.oid:
            return f"{self.oid}: {self.message}"
        return self.message


class FileInput(BaseModel):
    """A file to create in a test repository commit."""

    filename: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)


class CommitInput(BaseModel):
    """A single change-set of files for the test repository."""

    files: list[FileInput] = Field(default_factory=list)
    committer_name: str = "A N Other"
    committer_email: str = "noone@somewhere.com"
    message: str = "Test data"


class FileOutput(BaseModel):
    """A file materialized by the test repository, with its true identifier."""

    filename: str
    oid: str
    size: int = Field(..., ge=0)


class CommitOutput(BaseModel):
    """Files produced by one committed change-set, in input order."""

    files: list[FileOutput] = Field(default_factory=list)
