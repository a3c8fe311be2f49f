"""Recursive discovery of issues linked from a pull request.

Starting from the PR body, issue bodies are fetched breadth-first and their
links followed up to a maximum depth. A visited set makes the traversal
terminate on reference cycles (A -> B -> A) and the depth cap bounds the
number of fetches on long chains.

Source:
- src/monitor_pr/issues/links.py (parse_issue_links)
- src/monitor_pr/github/cli.py (GitHubCLI.fetch_issue_body)
"""

import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, Set, Tuple

from .links import parse_issue_links

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

IssueFetcher = Callable[[str, str, int], Awaitable[Optional[str]]]
"""Async callable returning the body of an issue, or None if it has none."""


async def discover_linked_issues(
    pr_body: Optional[str],
    fetch_issue: IssueFetcher,
    owner: str,
    repo: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Set[int]:
    """Discover all issues reachable from a PR body.

    Issues linked directly from the PR are at depth 0. An issue found at
    depth d is fetched and expanded only while d < max_depth, so with
    max_depth=2 a chain 1 -> 2 -> 3 -> 4 yields {1, 2, 3}.

    A failing fetch is logged and skipped: the issue stays in the result but
    its own links are not explored.

    Args:
        pr_body: The PR body text to start from.
        fetch_issue: Async function returning an issue body by number.
        owner: Repository owner.
        repo: Repository name.
        max_depth: Maximum expansion depth.

    Returns:
        Set of all discovered issue numbers.
    """
    all_issues: Set[int] = set()
    visited: Set[int] = set()
    queue: Deque[Tuple[Set[int], int]] = deque()

    initial_issues = parse_issue_links(pr_body)
    if initial_issues:
        queue.append((initial_issues, 0))

    while queue:
        issues, depth = queue.popleft()

        for issue_number in sorted(issues):
            if issue_number in visited:
                continue
            visited.add(issue_number)
            all_issues.add(issue_number)

            if depth >= max_depth:
                continue

            try:
                issue_body = await fetch_issue(owner, repo, issue_number)
            except Exception as exc:
                logger.warning(
                    "Failed to fetch issue %s/%s#%d, skipping its links: %s",
                    owner,
                    repo,
                    issue_number,
                    exc,
                )
                continue

            linked = parse_issue_links(issue_body)
            if linked:
                logger.debug(
                    "Issue #%d links to %s (depth %d)",
                    issue_number,
                    sorted(linked),
                    depth + 1,
                )
                queue.append((linked, depth + 1))

    return all_issues
