"""Command line entry point: test a Git LFS API server for compliance.

Usage::

    git-lfs-test-server-api [--url=<apiurl> | --clone=<cloneurl>] [<oid-exists-file> <oid-missing-file>]

Without file arguments the harness uploads fresh objects to the server and
synthesizes identifiers for missing ones. With both files it reads the objects
from them and changes nothing on the server.

Every option can also come from an ``LFS_TEST_*`` environment variable
(``LFS_TEST_API_URL``, ``LFS_TEST_ACCESS_TOKEN``, ...); command line values
win.

Exit status:
    0  every test passed
    1  at least one test failed
    2  configuration error, unreadable fixture file or failed fixture setup
"""

import argparse
import sys
from collections.abc import Sequence
from typing import TextIO

from lfs_compliance import __version__
from lfs_compliance.checks.batch import register_batch_checks
from lfs_compliance.checks.client import LfsApiClient
from lfs_compliance.config import HarnessConfig
from lfs_compliance.core.registry import TestRegistry
from lfs_compliance.core.runner import TestRunner
from lfs_compliance.endpoint import resolve_endpoint
from lfs_compliance.exceptions import ConfigurationError, HarnessError
from lfs_compliance.fixtures.build import prepare_fixtures
from lfs_compliance.models import RunReport
from lfs_compliance.observability.logging import bind_run_context, configure_logging, get_logger
from lfs_compliance.observability.metrics import write_metrics
from lfs_compliance.transfer.base import UploadQueueFactory
from lfs_compliance.transfer.http import http_queue_factory

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_TESTS_FAILED = 1
EXIT_FATAL = 2


def run_harness(
    config: HarnessConfig,
    registry: TestRegistry | None = None,
    api_client: LfsApiClient | None = None,
    queue_factory: UploadQueueFactory | None = None,
    stream: TextIO | None = None,
) -> RunReport:
    """Build fixtures once, then run every registered check against them.

    Args:
        config: Run configuration.
        registry: Checks to run. Defaults to the built-in batch checks.
        api_client: Client the built-in checks use. Defaults to one built
            from the configured endpoint.
        queue_factory: Upload queue factory. Defaults to the HTTP queue.
        stream: Where status lines go. Defaults to stdout.

    Raises:
        HarnessError: If configuration or fixture construction fails. No
            check has run in that case.
    """
    endpoint = resolve_endpoint(config)
    bind_run_context(endpoint=endpoint.url, mode="files" if config.file_mode else "upload")
    logger.info("harness.started", objects=config.object_count, concurrency=config.concurrent_transfers)

    owns_client = api_client is None
    if api_client is None:
        api_client = LfsApiClient.from_config(endpoint, config)

    try:
        if registry is None:
            registry = register_batch_checks(TestRegistry(), api_client)

        out = stream if stream is not None else sys.stdout
        if config.file_mode:
            out.write("Reading test data from files (no server content changes)\n")

        fixtures = prepare_fixtures(
            config,
            queue_factory if queue_factory is not None else http_queue_factory(endpoint, config),
        )

        runner = TestRunner(stream=out, line_length=config.line_length)
        return runner.run(registry, fixtures)
    finally:
        if owns_client:
            api_client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-lfs-test-server-api",
        description="Test a Git LFS API server for compliance",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-u", "--url", dest="api_url", help="URL of the API (must supply this or --clone)")
    source.add_argument(
        "-c",
        "--clone",
        dest="clone_url",
        help="Clone URL from which to find API (must supply this or --url)",
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="<oid-exists-file> <oid-missing-file>: read test objects instead of uploading",
    )
    parser.add_argument("--count", dest="object_count", type=int, help="objects to upload and synthesize (default: 50)")
    parser.add_argument("--concurrency", dest="concurrent_transfers", type=int, help="concurrent uploads (default: 8)")
    parser.add_argument("--token", dest="access_token", help="bearer token for the LFS API")
    parser.add_argument("--timeout", dest="timeout_seconds", type=float, help="HTTP timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="log every upload")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="emit JSON logs on stderr")
    parser.add_argument("--metrics-file", help="write Prometheus metrics to this file after the run")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> HarnessConfig:
    """Merge parsed arguments over environment settings.

    Raises:
        ConfigurationError: If the combination is invalid.
    """
    if len(args.files) not in (0, 2):
        raise ConfigurationError(
            "Must supply either no file arguments or both the exists AND missing file"
        )

    overrides = {
        "api_url": args.api_url,
        "clone_url": args.clone_url,
        "object_count": args.object_count,
        "concurrent_transfers": args.concurrent_transfers,
        "access_token": args.access_token,
        "timeout_seconds": args.timeout_seconds,
        "verbose": args.verbose,
        "log_level": args.log_level,
        "json_logs": args.json_logs,
        "metrics_file": args.metrics_file,
    }
    if args.files:
        overrides["exists_file"], overrides["missing_file"] = args.files
    return HarnessConfig.from_env(overrides=overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the harness and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        return EXIT_FATAL

    configure_logging(level=config.log_level, json_output=config.json_logs)

    try:
        report = run_harness(config)
    except HarnessError as e:
        logger.error("harness.aborted", error=e.message, error_type=type(e).__name__)
        print(e.message, file=sys.stderr)
        return EXIT_FATAL
    finally:
        if config.metrics_file:
            write_metrics(config.metrics_file)

    return EXIT_OK if report.success else EXIT_TESTS_FAILED


if __name__ == "__main__":
    sys.exit(main())
