"""Batch API compliance checks.

Each check asks the server about objects whose presence is known in advance
and compares the actions and errors it hands back with what the protocol
requires:

- upload of an absent object must offer an ``upload`` action
- upload of a present object must offer no ``upload`` action
- download of a present object must offer a ``download`` action
- download of an absent object must carry an error with code 404
"""

from collections.abc import Sequence

from lfs_compliance.checks.client import BatchObject, BatchResponse, LfsApiClient
from lfs_compliance.core.registry import TestRegistry
from lfs_compliance.exceptions import ComplianceFailure
from lfs_compliance.models import TestObject


def _lookup(response: BatchResponse, obj: TestObject, operation: str) -> BatchObject:
    returned = response.by_oid().get(obj.oid)
    if returned is None:
        raise ComplianceFailure(f"Batch {operation} response omitted object {obj.oid}")
    return returned


def expect_upload_action(response: BatchResponse, objects: Sequence[TestObject]) -> None:
    for obj in objects:
        returned = _lookup(response, obj, "upload")
        if returned.error is not None:
            raise ComplianceFailure(
                f"Unexpected error for missing object {obj.oid}: "
                f"{returned.error.code} {returned.error.message}"
            )
        if not returned.has_action("upload"):
            raise ComplianceFailure(f"Missing object {obj.oid} was not given an upload action")


def expect_no_upload_action(response: BatchResponse, objects: Sequence[TestObject]) -> None:
    for obj in objects:
        returned = _lookup(response, obj, "upload")
        if returned.error is not None:
            raise ComplianceFailure(
                f"Unexpected error for existing object {obj.oid}: "
                f"{returned.error.code} {returned.error.message}"
            )
        if returned.has_action("upload"):
            raise ComplianceFailure(f"Existing object {obj.oid} should not be given an upload action")


def expect_download_action(response: BatchResponse, objects: Sequence[TestObject]) -> None:
    for obj in objects:
        returned = _lookup(response, obj, "download")
        if returned.error is not None:
            raise ComplianceFailure(
                f"Unexpected error for existing object {obj.oid}: "
                f"{returned.error.code} {returned.error.message}"
            )
        if not returned.has_action("download"):
            raise ComplianceFailure(f"Existing object {obj.oid} was not given a download action")


def expect_not_found(response: BatchResponse, objects: Sequence[TestObject]) -> None:
    for obj in objects:
        returned = _lookup(response, obj, "download")
        if returned.has_action("download"):
            raise ComplianceFailure(f"Missing object {obj.oid} should not be given a download action")
        if returned.error is None:
            raise ComplianceFailure(f"Missing object {obj.oid} should have an error")
        if returned.error.code != 404:
            raise ComplianceFailure(
                f"Expected error code 404 for missing object {obj.oid}, got {returned.error.code}"
            )


def mixed_halves(
    existing: Sequence[TestObject],
    missing: Sequence[TestObject],
) -> tuple[list[TestObject], list[TestObject], list[TestObject]]:
    """Interleave the first half of each set.

    Returns:
        (request objects, existing part, missing part)
    """
    present = list(existing[: (len(existing) + 1) // 2])
    absent = list(missing[: (len(missing) + 1) // 2])
    request: list[TestObject] = []
    for i in range(max(len(present), len(absent))):
        if i < len(present):
            request.append(present[i])
        if i < len(absent):
            request.append(absent[i])
    return request, present, absent


def register_batch_checks(registry: TestRegistry, api: LfsApiClient) -> TestRegistry:
    """Register the batch API checks, in order, bound to ``api``."""

    @registry.test("Test batch: upload missing")
    def upload_missing(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        if not missing:
            return
        expect_upload_action(api.batch("upload", missing), missing)

    @registry.test("Test batch: upload existing")
    def upload_existing(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        if not existing:
            return
        expect_no_upload_action(api.batch("upload", existing), existing)

    @registry.test("Test batch: upload mixed")
    def upload_mixed(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        request, present, absent = mixed_halves(existing, missing)
        if not request:
            return
        response = api.batch("upload", request)
        expect_no_upload_action(response, present)
        expect_upload_action(response, absent)

    @registry.test("Test batch: download existing")
    def download_existing(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        if not existing:
            return
        expect_download_action(api.batch("download", existing), existing)

    @registry.test("Test batch: download missing")
    def download_missing(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        if not missing:
            return
        expect_not_found(api.batch("download", missing), missing)

    @registry.test("Test batch: download mixed")
    def download_mixed(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        request, present, absent = mixed_halves(existing, missing)
        if not request:
            return
        response = api.batch("download", request)
        expect_download_action(response, present)
        expect_not_found(response, absent)

    @registry.test("Test batch: response echoes objects")
    def response_echoes_objects(existing: Sequence[TestObject], missing: Sequence[TestObject]) -> None:
        request, _, _ = mixed_halves(existing, missing)
        if not request:
            return
        response = api.batch("download", request)
        requested = {obj.oid for obj in request}
        returned = [obj.oid for obj in response.objects]
        if len(returned) != len(set(returned)):
            raise ComplianceFailure("Batch response lists an object more than once")
        extra = set(returned) - requested
        if extra:
            raise ComplianceFailure(f"Batch response lists unrequested objects: {', '.join(sorted(extra))}")
        absent = requested - set(returned)
        if absent:
            raise ComplianceFailure(f"Batch response omitted objects: {', '.join(sorted(absent))}")

    return registry
