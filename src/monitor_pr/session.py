"""Monitor session connecting issue discovery, webhook server and forwarder.

A session runs once per monitor-pr invocation:
fetch PR → discover linked issues → generate secret → start webhook server →
start ``gh webhook forward`` → stream events until shutdown.

The session owns the forwarder subprocess and the webhook server, and
releases both in shutdown(). shutdown() is guarded by a flag so repeated
signals do not start a second, overlapping shutdown.

Source:
- src/monitor_pr/github/cli.py (GitHubCLI)
- src/monitor_pr/issues/discovery.py (discover_linked_issues)
- src/monitor_pr/server/app.py (create_webhook_app)
- src/monitor_pr/server/runner.py (WebhookServer)
- src/monitor_pr/forwarder/gh_webhook.py (WebhookForwarder)
- src/monitor_pr/events/sink.py (EventSink)
"""

import asyncio
import logging
import secrets
import string
from typing import FrozenSet, Optional

from src.monitor_pr.events.sink import EventSink
from src.monitor_pr.forwarder.gh_webhook import ForwarderError, WebhookForwarder
from src.monitor_pr.github.cli import GitHubCLI, GitHubCLIError
from src.monitor_pr.issues.discovery import DEFAULT_MAX_DEPTH, discover_linked_issues
from src.monitor_pr.server.app import WebhookServerOptions, create_webhook_app
from src.monitor_pr.server.runner import WebhookServer, WebhookServerError
from src.monitor_pr.webhook.models import WEBHOOK_EVENTS

logger = logging.getLogger(__name__)

SECRET_ALPHABET = string.ascii_letters + string.digits
SECRET_LENGTH = 32


class StartupError(Exception):
    """Raised when a monitor session cannot be started."""


def generate_secret(length: int = SECRET_LENGTH) -> str:
    """Generate a random alphanumeric webhook secret.

    Args:
        length: Number of characters.

    Returns:
        A secret drawn from [A-Za-z0-9] with the secrets module.
    """
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


class MonitorSession:
    """Runs the monitoring of one pull request.

    Accepts its collaborators via constructor injection so tests can
    replace the gh CLI, the forwarder and the event sink.

    Attributes:
        owner: Repository owner.
        repo: Repository name.
        pr_number: Number of the monitored pull request.
        github: gh CLI wrapper used to fetch the PR and issue bodies.
        forwarder: Webhook forwarder subprocess manager.
        sink: Receives every normalized event.
        max_depth: Depth limit for linked issue discovery.
        linked_issues: Issues discovered at startup (empty before start()).
        secret: Webhook secret in use (None before start()).
        server: The running webhook server (None before start()).
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        github: GitHubCLI,
        forwarder: WebhookForwarder,
        sink: EventSink,
        max_depth: int = DEFAULT_MAX_DEPTH,
        secret: Optional[str] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.pr_number = pr_number
        self.github = github
        self.forwarder = forwarder
        self.sink = sink
        self.max_depth = max_depth
        self.linked_issues: FrozenSet[int] = frozenset()
        self.secret: Optional[str] = None
        self.server: Optional[WebhookServer] = None

        self._configured_secret = secret
        self._shutting_down = False
        self._shutdown_task: Optional[asyncio.Task] = None
        self._closed = asyncio.Event()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    async def start(self) -> int:
        """Start monitoring.

        Returns:
            The port the webhook server listens on.

        Raises:
            StartupError: If the PR cannot be fetched, the server cannot be
                          started, or the forwarder cannot be launched.
        """
        logger.info(
            "Monitoring PR #%d in %s/%s...", self.pr_number, self.owner, self.repo
        )

        try:
            pr = await self.github.fetch_pull_request(
                self.owner, self.repo, self.pr_number
            )
        except GitHubCLIError as exc:
            raise StartupError(f"Failed to fetch PR: {exc}") from exc

        logger.info("PR state: %s", pr.state)

        linked = await discover_linked_issues(
            pr.body,
            self.github.fetch_issue_body,
            self.owner,
            self.repo,
            max_depth=self.max_depth,
        )
        self.linked_issues = frozenset(linked)
        logger.info(
            "Found %d linked issues: %s",
            len(self.linked_issues),
            ", ".join(str(n) for n in sorted(self.linked_issues)) or "none",
        )

        self.secret = self._configured_secret or generate_secret()

        app = create_webhook_app(
            WebhookServerOptions(
                target_pr=self.pr_number,
                linked_issues=self.linked_issues,
                on_event=self.sink.emit,
                secret=self.secret,
                on_error=self._on_server_error,
            )
        )
        self.server = WebhookServer(app)

        try:
            port = await self.server.start()
        except WebhookServerError as exc:
            raise StartupError(str(exc)) from exc

        try:
            await self.forwarder.start(
                self.owner, self.repo, port, self.secret, WEBHOOK_EVENTS
            )
        except ForwarderError as exc:
            raise StartupError(str(exc)) from exc

        logger.info("Ready! Streaming events to stdout...")
        return port

    def request_shutdown(self) -> None:
        """Schedule shutdown(); intended as a signal handler.

        Only the first call schedules anything.
        """
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.ensure_future(self.shutdown())

    async def shutdown(self) -> None:
        """Terminate the forwarder, stop the server and release waiters.

        A call made while a shutdown is already in progress, or after it
        completed, returns immediately.
        """
        if self._shutting_down:
            return
        self._shutting_down = True

        logger.info("Shutting down...")
        try:
            await self.forwarder.stop()
            if self.server is not None:
                await self.server.stop()
            self.sink.close()
        finally:
            self._closed.set()

        logger.info("Goodbye!")

    async def wait_closed(self) -> None:
        """Wait until shutdown() has completed.

        Raises:
            Exception: Whatever a shutdown scheduled by request_shutdown()
                       raised.
        """
        await self._closed.wait()
        if self._shutdown_task is not None:
            await self._shutdown_task

    def _on_server_error(self, error: Exception) -> None:
        logger.error("Server error: %s", error)
