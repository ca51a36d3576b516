"""Sequential runner for registered compliance checks.

Every check is called synchronously, in registration order, with the full
existing and missing fixture sets. Checks run against shared server state, so
they are never interleaved: the runner waits for one to return before starting
the next.

Output format, one line per check::

    Running 3 tests...
    Test batch: upload missing                                             OK
    Test batch: download missing                                           FAILED
    expected error code 404 for 4d7a2146..., got 200

Before a check runs its name is printed padded (or truncated) to the line
width followed by ``...`` and a carriage return; the result then overwrites
that line. A failing check never stops the run.
"""

import sys
import time
from typing import TextIO

from lfs_compliance.core.registry import TestRegistry
from lfs_compliance.models import (
    FixtureSet,
    RunReport,
    ServerTest,
    TestOutcome,
    TestResult,
)
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.observability.metrics import record_test_result

logger = get_logger(__name__)

DEFAULT_LINE_LENGTH = 70


def format_status_line(name: str, line_length: int = DEFAULT_LINE_LENGTH) -> str:
    """Truncate or space-pad ``name`` to exactly ``line_length`` columns.

    Examples:
        >>> len(format_status_line("short"))
        70
        >>> format_status_line("abcdef", 3)
        'abc'
    """
    if len(name) > line_length:
        return name[:line_length]
    return name.ljust(line_length)


def describe_error(error: Exception) -> str:
    """Text shown under a FAILED line."""
    text = str(error)
    if text:
        return text
    return type(error).__name__


class TestRunner:
    """Runs checks one at a time and reports each on its own line.

    Attributes:
        stream: Where status lines are written. Defaults to sys.stdout.
        line_length: Column width of the test name.
    """

    __test__ = False

    def __init__(self, stream: TextIO | None = None, line_length: int = DEFAULT_LINE_LENGTH) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.line_length = line_length

    def run(self, registry: TestRegistry, fixtures: FixtureSet) -> RunReport:
        """Run every registered check against ``fixtures``.

        The registry is frozen first, so nothing can be added mid-run.
        """
        registry.freeze()
        self._write(f"Running {len(registry)} tests...\n")
        logger.info(
            "runner.started",
            tests=len(registry),
            existing=len(fixtures.existing),
            missing=len(fixtures.missing),
        )

        report = RunReport()
        for test in registry:
            report.results.append(self.run_test(test, fixtures))

        logger.info("runner.finished", passed=report.passed, failed=report.failed)
        return report

    def run_test(self, test: ServerTest, fixtures: FixtureSet) -> TestResult:
        """Run one check and print its outcome."""
        line = format_status_line(test.name, self.line_length)
        self._write(f"{line}...\r")

        started = time.perf_counter()
        error: Exception | None = None
        try:
            test.func(fixtures.existing, fixtures.missing)
        except Exception as e:
            error = e
        duration_ms = int((time.perf_counter() - started) * 1000)

        if error is not None:
            result = TestResult(
                name=test.name,
                outcome=TestOutcome.FAILED,
                error=describe_error(error),
                duration_ms=duration_ms,
            )
            self._write(f"{line} FAILED\n{result.error}\n")
            logger.info(
                "runner.test.finished",
                test=test.name,
                outcome=result.outcome.value,
                error_type=type(error).__name__,
                duration_ms=duration_ms,
            )
        else:
            result = TestResult(name=test.name, outcome=TestOutcome.PASSED, duration_ms=duration_ms)
            self._write(f"{line} OK\n")
            logger.info(
                "runner.test.finished",
                test=test.name,
                outcome=result.outcome.value,
                duration_ms=duration_ms,
            )

        record_test_result(result.outcome.value, duration_ms)
        return result

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
