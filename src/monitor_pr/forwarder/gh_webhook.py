"""``gh webhook forward`` subprocess management.

Runs ``gh webhook forward`` as an async subprocess that relays repository
webhooks to the local webhook server. The forwarder's stderr carries its
status messages; each line is streamed to the log. Its stdout is discarded
so nothing but monitor events reaches monitor-pr's own stdout.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class ForwarderError(Exception):
    """Raised when the webhook forwarder cannot be started."""


class WebhookForwarder:
    """Manages the ``gh webhook forward`` subprocess.

    Attributes:
        gh_path: Path or name of the gh executable.
        stop_timeout_seconds: Time allowed for a graceful exit after
                              SIGTERM before the process is killed.
    """

    def __init__(self, gh_path: str = "gh", stop_timeout_seconds: float = 5.0):
        self.gh_path = gh_path
        self.stop_timeout_seconds = stop_timeout_seconds
        self._process: Optional[asyncio.subprocess.Process] = None
        self._monitor_task: Optional[asyncio.Task] = None

    @property
    def returncode(self) -> Optional[int]:
        """Exit code of the forwarder, None while it runs or before start."""
        if self._process is None:
            return None
        return self._process.returncode

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    def build_command(
        self,
        owner: str,
        repo: str,
        port: int,
        secret: str,
        events: Sequence[str],
    ) -> List[str]:
        """Build the gh command line for forwarding to a local port.

        Args:
            owner: Repository owner.
            repo: Repository name.
            port: Local webhook server port.
            secret: Secret used to sign forwarded deliveries.
            events: Webhook event types to subscribe to.

        Returns:
            The argument vector, starting with the gh executable.
        """
        return [
            self.gh_path,
            "webhook",
            "forward",
            "--repo",
            f"{owner}/{repo}",
            "--events",
            ",".join(events),
            "--url",
            f"http://127.0.0.1:{port}/",
            "--secret",
            secret,
        ]

    async def start(
        self,
        owner: str,
        repo: str,
        port: int,
        secret: str,
        events: Sequence[str],
        log_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Launch the forwarder.

        Args:
            owner: Repository owner.
            repo: Repository name.
            port: Local webhook server port.
            secret: Secret used to sign forwarded deliveries.
            events: Webhook event types to subscribe to.
            log_callback: Optional function called with each stderr line.

        Raises:
            ForwarderError: If the forwarder is already running or the gh
                            executable cannot be started.
        """
        if self._process is not None:
            raise ForwarderError("Webhook forwarder already started")

        command = self.build_command(owner, repo, port, secret, events)
        logger.info(
            "Starting webhook forwarder for %s/%s, events: %s",
            owner,
            repo,
            ", ".join(events),
        )

        try:
            self._process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ForwarderError(f"Failed to start webhook forwarder: {exc}") from exc

        self._monitor_task = asyncio.create_task(self._monitor(log_callback))

    async def stop(self) -> Optional[int]:
        """Terminate the forwarder and wait for it to exit.

        Sends SIGTERM, then SIGKILL if the process has not exited within
        stop_timeout_seconds. Safe to call when the forwarder never started
        or has already exited.

        Returns:
            The forwarder's exit code, or None if it was never started.
        """
        process = self._process
        if process is None:
            return None

        if process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass

            try:
                await asyncio.wait_for(process.wait(), timeout=self.stop_timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning(
                    "Webhook forwarder did not exit after %.1fs, killing it",
                    self.stop_timeout_seconds,
                )
                process.kill()
                await process.wait()

        if self._monitor_task is not None:
            await self._monitor_task
            self._monitor_task = None

        return process.returncode

    async def _monitor(self, log_callback: Optional[Callable[[str], None]]) -> None:
        """Relay stderr to the log until EOF, then report the exit code."""
        process = self._process
        assert process is not None

        async for line in self._read_stream(process.stderr):
            if not line:
                continue
            logger.info("[gh webhook] %s", line)
            if log_callback is not None:
                log_callback(line)

        exit_code = await process.wait()
        if exit_code > 0:
            logger.error("Webhook forwarder exited with code %d", exit_code)
        elif exit_code < 0:
            # Negative codes mean the process was ended by a signal.
            logger.info("Webhook forwarder stopped by signal %d", -exit_code)
        else:
            logger.info("Webhook forwarder exited")

    async def _read_stream(self, stream: Optional[asyncio.StreamReader]):
        """Yield decoded lines from an async stream."""
        if stream is None:
            return

        while True:
            raw_line = await stream.readline()
            if not raw_line:
                break
            yield raw_line.decode("utf-8", errors="replace").rstrip()
