"""Unit tests for the sequential test runner."""

import io

import pytest
from pydantic import ValidationError

from lfs_compliance.core.registry import TestRegistry
from lfs_compliance.core.runner import TestRunner, describe_error, format_status_line
from lfs_compliance.exceptions import ComplianceFailure
from lfs_compliance.models import FixtureSet, TestObject, TestOutcome


@pytest.fixture
def fixtures() -> FixtureSet:
    return FixtureSet(
        existing=(TestObject(oid="a" * 64, size=100),),
        missing=(TestObject(oid="b" * 64, size=200),),
    )


class TestFormatStatusLine:
    def test_pads_short_names(self) -> None:
        line = format_status_line("short", 10)
        assert line == "short     "

    def test_truncates_long_names(self) -> None:
        assert format_status_line("x" * 100, 70) == "x" * 70

    def test_exact_length_unchanged(self) -> None:
        assert format_status_line("abc", 3) == "abc"


class TestDescribeError:
    def test_uses_message(self) -> None:
        assert describe_error(ValueError("bad size")) == "bad size"

    def test_falls_back_to_type_name(self) -> None:
        assert describe_error(AssertionError()) == "AssertionError"


class TestRun:
    def test_second_of_three_fails(self, fixtures: FixtureSet) -> None:
        calls: list[str] = []
        registry = TestRegistry()

        def passing(name: str):
            def check(existing, missing) -> None:
                calls.append(name)

            return check

        def failing(existing, missing) -> None:
            calls.append("second")
            raise ComplianceFailure("expected 404")

        registry.register("first", passing("first"))
        registry.register("second", failing)
        registry.register("third", passing("third"))

        stream = io.StringIO()
        report = TestRunner(stream=stream, line_length=10).run(registry, fixtures)

        assert calls == ["first", "second", "third"]
        assert [result.outcome for result in report.results] == [
            TestOutcome.PASSED,
            TestOutcome.FAILED,
            TestOutcome.PASSED,
        ]
        assert report.results[1].error == "expected 404"
        assert report.passed == 2
        assert report.failed == 1
        assert stream.getvalue() == (
            "Running 3 tests...\n"
            "first     ...\r"
            "first      OK\n"
            "second    ...\r"
            "second     FAILED\n"
            "expected 404\n"
            "third     ...\r"
            "third      OK\n"
        )

    def test_every_test_gets_identical_fixtures(self, fixtures: FixtureSet) -> None:
        seen = []
        registry = TestRegistry()

        def record(existing, missing) -> None:
            seen.append((existing, missing))

        def mutate_attempt(existing, missing) -> None:
            seen.append((existing, missing))
            with pytest.raises(ValidationError):
                existing[0].size = 1
            with pytest.raises(TypeError):
                existing[0] = TestObject(oid="c" * 64, size=1)
            existing[0].size = 1

        registry.register("one", record)
        registry.register("two", mutate_attempt)
        registry.register("three", record)

        report = TestRunner(stream=io.StringIO()).run(registry, fixtures)

        assert [result.outcome for result in report.results] == [
            TestOutcome.PASSED,
            TestOutcome.FAILED,
            TestOutcome.PASSED,
        ]
        assert len(seen) == 3
        assert all(pair == (fixtures.existing, fixtures.missing) for pair in seen)
        assert seen[2][0][0].size == 100
        assert fixtures.existing[0].size == 100

    def test_unexpected_exception_counts_as_failure(self, fixtures: FixtureSet) -> None:
        registry = TestRegistry()
        registry.register("crash", lambda existing, missing: {}["nope"])

        stream = io.StringIO()
        report = TestRunner(stream=stream).run(registry, fixtures)

        assert not report.success
        assert report.results[0].error == "'nope'"
        assert " FAILED\n'nope'\n" in stream.getvalue()

    def test_run_freezes_registry(self, fixtures: FixtureSet) -> None:
        registry = TestRegistry()
        TestRunner(stream=io.StringIO()).run(registry, fixtures)
        assert registry.frozen

    def test_empty_registry(self, fixtures: FixtureSet) -> None:
        stream = io.StringIO()
        report = TestRunner(stream=stream).run(TestRegistry(), fixtures)

        assert report.results == []
        assert stream.getvalue() == "Running 0 tests...\n"
