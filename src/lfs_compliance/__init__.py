"""Compliance test harness for Git LFS API servers.

This package builds a deterministic corpus of objects known to exist on a
server and objects known to be absent, then runs a registered suite of batch
API checks against the server and reports pass or fail for each.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
