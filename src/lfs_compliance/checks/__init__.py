"""Built-in compliance checks for the Git LFS batch API."""

from lfs_compliance.checks.batch import register_batch_checks
from lfs_compliance.checks.client import BatchObject, BatchResponse, LfsApiClient

__all__ = ["register_batch_checks", "LfsApiClient", "BatchResponse", "BatchObject"]
