"""Command-line entry point for monitor-pr.

Usage:
    monitor-pr <pr-number> [--repo owner/repo] [--max-depth N] [--verbose]

Normalized events are written to stdout as newline-delimited JSON; all
progress and diagnostics are logged to stderr. The process runs until it
receives SIGINT or SIGTERM and then exits with status 0. Startup failures
exit with status 1.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional, Tuple

from pydantic import ValidationError

from src.monitor_pr.config import MonitorSettings, get_settings
from src.monitor_pr.events.sink import JsonLinesEventSink
from src.monitor_pr.forwarder.gh_webhook import WebhookForwarder
from src.monitor_pr.github.cli import GitHubCLI
from src.monitor_pr.session import MonitorSession, StartupError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if not value:
        return "(generated)"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: MonitorSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.debug("monitor-pr configuration:")
    logger.debug(f"  Default repository: {settings.owner}/{settings.repo}")
    logger.debug(f"  Max depth: {settings.max_depth}")
    logger.debug(f"  Webhook secret: {_redact_secret(settings.webhook_secret)}")
    logger.debug(f"  gh CLI path: {settings.gh_cli_path}")
    logger.debug(f"  gh timeout seconds: {settings.gh_timeout_seconds}")
    logger.debug(
        f"  Forwarder stop timeout seconds: {settings.forwarder_stop_timeout_seconds}"
    )


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout is reserved for events."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def parse_repo(value: str) -> Tuple[str, str]:
    """Split an "owner/repo" string.

    Raises:
        ValueError: If the value is not of the form owner/repo.
    """
    parts = value.split("/")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Invalid repository '{value}', expected owner/repo")
    return parts[0].strip(), parts[1].strip()


def parse_pr_number(value: str) -> int:
    """Parse a positive PR number.

    Raises:
        ValueError: If the value is not a positive integer.
    """
    try:
        number = int(value)
    except ValueError:
        raise ValueError("Invalid PR number") from None
    if number <= 0:
        raise ValueError("Invalid PR number")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monitor-pr",
        description="Stream CI, review and comment events for a GitHub pull request.",
    )
    parser.add_argument("pr_number", help="pull request number to monitor")
    parser.add_argument(
        "--repo",
        help="repository as owner/repo (default: MONITOR_PR_OWNER/MONITOR_PR_REPO)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="levels of issue links to follow (default: MONITOR_PR_MAX_DEPTH or 3)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="enable debug logging",
    )
    return parser


async def run_monitor(
    owner: str,
    repo: str,
    pr_number: int,
    max_depth: int,
    settings: MonitorSettings,
) -> int:
    """Run a monitor session until a shutdown signal arrives.

    Returns:
        Process exit status.
    """
    session = MonitorSession(
        owner=owner,
        repo=repo,
        pr_number=pr_number,
        github=GitHubCLI(
            gh_path=settings.gh_cli_path,
            timeout_seconds=settings.gh_timeout_seconds,
        ),
        forwarder=WebhookForwarder(
            gh_path=settings.gh_cli_path,
            stop_timeout_seconds=settings.forwarder_stop_timeout_seconds,
        ),
        sink=JsonLinesEventSink(),
        max_depth=max_depth,
        secret=settings.webhook_secret,
    )

    try:
        await session.start()
    except StartupError as exc:
        logger.error("%s", exc)
        await session.shutdown()
        return 1

    loop = asyncio.get_running_loop()
    for sig in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, session.request_shutdown)

    try:
        await session.wait_closed()
    except Exception:
        logger.exception("Shutdown failed")
        return 1
    finally:
        for sig in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and run the monitor.

    Args:
        argv: Command line arguments, defaults to sys.argv[1:].

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", exc)
        return 1

    configure_logging("DEBUG" if args.verbose else settings.log_level)
    _log_configuration(settings)

    try:
        pr_number = parse_pr_number(args.pr_number)
        owner, repo = (
            parse_repo(args.repo) if args.repo else (settings.owner, settings.repo)
        )
    except ValueError as exc:
        logger.error("Error: %s", exc)
        return 1

    max_depth = settings.max_depth if args.max_depth is None else args.max_depth
    if max_depth < 0:
        logger.error("Error: --max-depth must be at least 0")
        return 1

    try:
        return asyncio.run(run_monitor(owner, repo, pr_number, max_depth, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted during startup")
        return 130


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
