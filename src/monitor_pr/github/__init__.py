"""GitHub integration for monitor-pr.

This module provides access to pull requests and issues through the gh CLI:
- GitHubCLI: async ``gh api`` wrapper
- PullRequestDetails: PR body and state
- GitHubCLIError: raised on gh failures
"""

from .cli import GitHubCLI, GitHubCLIError, PullRequestDetails

__all__ = [
    "GitHubCLI",
    "GitHubCLIError",
    "PullRequestDetails",
]
