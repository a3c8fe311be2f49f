"""GitHub access through the ``gh`` command-line tool.

monitor-pr reuses the user's existing ``gh`` authentication instead of
managing tokens itself. This module wraps ``gh api`` calls as async
subprocesses with timeout enforcement:

- fetch_pull_request: PR body and state (required at startup)
- fetch_issue_body: issue body used for linked issue discovery
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


class GitHubCLIError(Exception):
    """Raised when a ``gh`` invocation fails.

    Attributes:
        message: Human-readable error description.
        exit_code: Process exit code, if the process ran.
        stderr: Captured standard error, if any.
    """

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.message = message
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)


@dataclass
class PullRequestDetails:
    """The parts of a pull request monitor-pr needs at startup.

    Attributes:
        number: Pull request number.
        body: Pull request description ("" when GitHub reports none).
        state: Pull request state, e.g. "open" or "closed".
    """

    number: int
    body: str
    state: str


class GitHubCLI:
    """Async wrapper around ``gh api``.

    Attributes:
        gh_path: Path or name of the gh executable.
        timeout_seconds: Maximum time for a single gh invocation.
    """

    def __init__(self, gh_path: str = "gh", timeout_seconds: float = 30):
        self.gh_path = gh_path
        self.timeout_seconds = timeout_seconds

    async def fetch_pull_request(
        self, owner: str, repo: str, number: int
    ) -> PullRequestDetails:
        """Fetch a pull request's body and state.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Pull request number.

        Returns:
            PullRequestDetails for the PR.

        Raises:
            GitHubCLIError: If gh fails or returns an unexpected document.
        """
        data = await self._api_get(f"repos/{owner}/{repo}/pulls/{number}")
        if not isinstance(data, dict):
            raise GitHubCLIError(f"Unexpected response for PR #{number}")

        return PullRequestDetails(
            number=number,
            body=data.get("body") or "",
            state=data.get("state") or "unknown",
        )

    async def fetch_issue_body(
        self, owner: str, repo: str, number: int
    ) -> Optional[str]:
        """Fetch an issue's body.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Issue number.

        Returns:
            The issue body, or None if the issue has no body.

        Raises:
            GitHubCLIError: If gh fails or returns an unexpected document.
        """
        data = await self._api_get(f"repos/{owner}/{repo}/issues/{number}")
        if not isinstance(data, dict):
            raise GitHubCLIError(f"Unexpected response for issue #{number}")

        body = data.get("body")
        if not isinstance(body, str) or not body.strip():
            return None
        return body

    async def _api_get(self, path: str) -> Any:
        """Run ``gh api <path>`` and decode its JSON output.

        Raises:
            GitHubCLIError: On process failure or invalid JSON.
        """
        stdout = await self._run("api", path)
        try:
            return json.loads(stdout)
        except ValueError as exc:
            raise GitHubCLIError(f"Invalid JSON from gh api {path}: {exc}") from exc

    async def _run(self, *args: str) -> str:
        """Run gh with the given arguments and return its stdout.

        Raises:
            GitHubCLIError: If gh cannot be started, times out, or exits
                            with a non-zero code.
        """
        logger.debug("Running %s %s", self.gh_path, " ".join(args))

        try:
            process = await asyncio.create_subprocess_exec(
                self.gh_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise GitHubCLIError(f"Failed to start {self.gh_path}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise GitHubCLIError(
                f"gh {args[0]} timed out after {self.timeout_seconds}s"
            ) from exc

        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            raise GitHubCLIError(
                f"gh {' '.join(args)} failed: {stderr_text or 'no output'}",
                exit_code=process.returncode,
                stderr=stderr_text,
            )

        return stdout.decode("utf-8", errors="replace")
