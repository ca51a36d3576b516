"""Core harness logic: the check registry and the sequential runner.

- Registry: ordered, append-only table of named checks
- Runner: calls each check with the shared fixtures and reports the outcome
"""

from lfs_compliance.core.registry import TestRegistry
from lfs_compliance.core.runner import TestRunner, format_status_line

__all__ = ["TestRegistry", "TestRunner", "format_status_line"]
