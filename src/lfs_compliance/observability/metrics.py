"""Prometheus metrics for the LFS compliance harness.

Metrics include:

- Test outcome counters and a duration histogram
- Fixture object counters by kind (uploaded, synthesized, loaded)
- Transfer error counters by classification
- Bytes pushed to the server while building fixtures

The harness is a short-lived process, so metrics are not served over HTTP;
``write_metrics`` dumps them in text exposition format for a node exporter
textfile collector or a CI artifact.

Examples:
    Recording a test result::

        from lfs_compliance.observability.metrics import record_test_result

        record_test_result(outcome="FAILED", duration_ms=42)

    Writing metrics at the end of a run::

        from lfs_compliance.observability.metrics import write_metrics

        write_metrics("/var/lib/node_exporter/lfs_compliance.prom")
"""

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

# Labels: outcome (PASSED, FAILED)
tests_total = Counter(
    "lfs_compliance_tests_total",
    "Total number of compliance tests run",
    ["outcome"],
)

test_duration_seconds = Histogram(
    "lfs_compliance_test_duration_seconds",
    "Time spent inside a single compliance test",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

# Labels: kind (uploaded, synthesized, loaded_existing, loaded_missing)
fixture_objects_total = Counter(
    "lfs_compliance_fixture_objects_total",
    "Fixture objects produced, by source",
    ["kind"],
)

# Labels: fatal (true, false)
transfer_errors_total = Counter(
    "lfs_compliance_transfer_errors_total",
    "Errors accumulated by the upload queue",
    ["fatal"],
)

uploaded_bytes_total = Counter(
    "lfs_compliance_uploaded_bytes_total",
    "Bytes uploaded to the server while building fixtures",
)


def record_test_result(outcome: str, duration_ms: int) -> None:
    """Record a finished compliance test.

    Args:
        outcome: PASSED or FAILED
        duration_ms: Time spent inside the test in milliseconds

    Examples:
        >>> record_test_result("PASSED", 12)
    """
    tests_total.labels(outcome=outcome).inc()
    test_duration_seconds.observe(duration_ms / 1000.0)


def record_fixture_objects(kind: str, count: int) -> None:
    """Record fixture objects produced by one source.

    Examples:
        >>> record_fixture_objects("synthesized", 50)
    """
    fixture_objects_total.labels(kind=kind).inc(count)


def record_transfer_error(fatal: bool) -> None:
    """Record an error accumulated by the upload queue."""
    transfer_errors_total.labels(fatal=str(fatal).lower()).inc()


def record_uploaded_bytes(size: int) -> None:
    """Record bytes pushed by a successful upload action."""
    uploaded_bytes_total.inc(size)


def write_metrics(path: str) -> None:
    """Write every registered metric to ``path`` in text exposition format.

    The file is written atomically (temp file plus rename).
    """
    write_to_textfile(path, REGISTRY)
