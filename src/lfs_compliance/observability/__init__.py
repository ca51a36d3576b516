"""Observability utilities for the LFS compliance harness.

This package provides:
- Structured logging with contextual information
- Prometheus metrics for test outcomes and fixture uploads

Logs go to stderr so that the runner's status lines on stdout stay readable.
"""

from lfs_compliance.observability.logging import bind_run_context, configure_logging, get_logger
from lfs_compliance.observability.metrics import (
    record_fixture_objects,
    record_test_result,
    record_transfer_error,
    record_uploaded_bytes,
    write_metrics,
)

__all__ = [
    "bind_run_context",
    "configure_logging",
    "get_logger",
    "record_test_result",
    "record_fixture_objects",
    "record_transfer_error",
    "record_uploaded_bytes",
    "write_metrics",
]
