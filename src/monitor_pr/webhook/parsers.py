"""Per-payload normalizers for GitHub webhook events.

Each parser takes a validated payload model, the monitored PR number and
the set of linked issue numbers, and returns a MonitorEvent when the payload
concerns the monitored PR (or a linked issue), or None otherwise.

GitHub Webhook Payload Structure (issue_comment event, abridged):
{
  "action": "created",
  "comment": {"body": "LGTM", "user": {"login": "octocat"}},
  "issue": {
    "number": 42,
    "pull_request": {"url": "..."}    # present only for PR conversations
  }
}
"""

import logging
from typing import AbstractSet, Optional

from .models import (
    CheckRunPayload,
    CheckSuitePayload,
    CIEvent,
    CommentEvent,
    IssueCommentPayload,
    PullRequestReviewCommentPayload,
    PullRequestReviewPayload,
    ReviewEvent,
)
from .normalize import normalize_conclusion, normalize_review_state, normalize_status

logger = logging.getLogger(__name__)

# Review actions that produce a ReviewEvent; "edited" and others are ignored.
REVIEW_ACTIONS = frozenset({"submitted", "dismissed"})


def parse_check_run(
    payload: CheckRunPayload,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[CIEvent]:
    """Parse a check_run payload into a CIEvent for the monitored PR."""
    check_run = payload.check_run
    if target_pr not in {pr.number for pr in check_run.pull_requests}:
        return None

    return CIEvent(
        check=check_run.name,
        status=normalize_status(check_run.status),
        conclusion=normalize_conclusion(check_run.conclusion),
    )


def parse_check_suite(
    payload: CheckSuitePayload,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[CIEvent]:
    """Parse a check_suite payload into a CIEvent named "check_suite"."""
    check_suite = payload.check_suite
    if target_pr not in {pr.number for pr in check_suite.pull_requests}:
        return None

    return CIEvent(
        check="check_suite",
        status=normalize_status(check_suite.status),
        conclusion=normalize_conclusion(check_suite.conclusion),
    )


def parse_review(
    payload: PullRequestReviewPayload,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[ReviewEvent]:
    """Parse a pull_request_review payload into a ReviewEvent.

    Only submitted and dismissed reviews are reported. A dismissal is
    reported as DISMISSED regardless of the review state.
    """
    if payload.pull_request.number != target_pr:
        return None

    if payload.action not in REVIEW_ACTIONS:
        logger.debug("Ignoring review action: %s", payload.action)
        return None

    return ReviewEvent(
        pr=target_pr,
        user=payload.review.user.login,
        action=normalize_review_state(payload.review.state, payload.action),
    )


def parse_review_comment(
    payload: PullRequestReviewCommentPayload,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[CommentEvent]:
    """Parse a pull_request_review_comment payload into a PR CommentEvent."""
    if payload.pull_request.number != target_pr:
        return None

    if payload.action != "created":
        return None

    return CommentEvent(
        pr=target_pr,
        user=payload.comment.user.login,
        body=payload.comment.body or "",
    )


def parse_issue_comment(
    payload: IssueCommentPayload,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[CommentEvent]:
    """Parse an issue_comment payload into a CommentEvent.

    GitHub delivers both PR conversation comments and plain issue comments
    as issue_comment events. A comment on the monitored PR yields a
    CommentEvent with ``pr`` set; a comment on a linked issue yields one
    with ``issue`` set. Everything else is ignored.
    """
    if payload.action != "created":
        return None

    issue = payload.issue
    user = payload.comment.user.login
    body = payload.comment.body or ""

    if issue.is_pull_request and issue.number == target_pr:
        return CommentEvent(pr=target_pr, user=user, body=body)

    if not issue.is_pull_request and issue.number in linked_issues:
        return CommentEvent(issue=issue.number, user=user, body=body)

    return None
