"""Linked issue discovery.

Parses issue references out of PR and issue bodies and follows them to
build the set of issues whose comments are monitored alongside the PR.
"""

from .discovery import DEFAULT_MAX_DEPTH, IssueFetcher, discover_linked_issues
from .links import parse_issue_links

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "IssueFetcher",
    "discover_linked_issues",
    "parse_issue_links",
]
