"""Webhook payload and normalized event models for monitor-pr.

This module defines two groups of Pydantic models:

- Upstream payload models: partial definitions of the five GitHub webhook
  payloads monitor-pr subscribes to. Only the fields the normalizers read
  are declared; everything else in the payload is ignored.
- MonitorEvent models: the small closed set of events streamed to the
  consumer (CIEvent, ReviewEvent, CommentEvent).

The models use Pydantic for validation so that a malformed upstream payload
is rejected before any normalizer looks at it.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class WebhookEventType(str, Enum):
    """GitHub webhook event types handled by monitor-pr.

    The value is the string GitHub sends in the X-GitHub-Event header.
    """

    CHECK_RUN = "check_run"
    CHECK_SUITE = "check_suite"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    ISSUE_COMMENT = "issue_comment"


# Event types passed to the webhook forwarder subscription.
WEBHOOK_EVENTS: List[str] = [event_type.value for event_type in WebhookEventType]


# =============================================================================
# Normalized events
# =============================================================================


class CheckStatus(str, Enum):
    """Lifecycle state of a check run or check suite."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CheckConclusion(str, Enum):
    """Final outcome of a completed check."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    NEUTRAL = "neutral"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"


class ReviewAction(str, Enum):
    """Outcome of a pull request review."""

    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"
    COMMENTED = "commented"
    DISMISSED = "dismissed"


class CIEvent(BaseModel):
    """A check run or check suite update for the monitored PR.

    Attributes:
        event: Discriminator, always "ci".
        check: Check run name, or "check_suite" for suite-level updates.
        status: Normalized check status.
        conclusion: Normalized conclusion, None while the check is running.
    """

    event: Literal["ci"] = "ci"
    check: str
    status: CheckStatus
    conclusion: Optional[CheckConclusion] = None

    def to_output_dict(self) -> Dict[str, Any]:
        """Serialize for the event stream; conclusion is always present."""
        return self.model_dump(mode="json")


class ReviewEvent(BaseModel):
    """A review submitted on, or dismissed from, the monitored PR."""

    event: Literal["review"] = "review"
    pr: int = Field(..., gt=0)
    user: str
    action: ReviewAction

    def to_output_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class CommentEvent(BaseModel):
    """A new comment on the monitored PR or on one of its linked issues.

    Exactly one of ``pr`` and ``issue`` is set.

    Attributes:
        event: Discriminator, always "comment".
        pr: PR number when the comment was made on the monitored PR.
        issue: Issue number when the comment was made on a linked issue.
        user: Login of the comment author.
        body: Comment text.
    """

    event: Literal["comment"] = "comment"
    pr: Optional[int] = Field(default=None, gt=0)
    issue: Optional[int] = Field(default=None, gt=0)
    user: str
    body: str = ""

    @model_validator(mode="after")
    def check_single_target(self) -> "CommentEvent":
        """Require exactly one of pr and issue."""
        if (self.pr is None) == (self.issue is None):
            raise ValueError("exactly one of 'pr' and 'issue' must be set")
        return self

    def to_output_dict(self) -> Dict[str, Any]:
        """Serialize for the event stream, omitting the unset target."""
        return self.model_dump(mode="json", exclude_none=True)


MonitorEvent = Union[CIEvent, ReviewEvent, CommentEvent]


# =============================================================================
# Upstream payloads
# =============================================================================


class GitHubUser(BaseModel):
    """The user object embedded in reviews and comments."""

    login: str


class PullRequestRef(BaseModel):
    """A pull request reference carrying only its number."""

    number: int


class CheckRunDetails(BaseModel):
    name: str
    status: Optional[str] = None
    conclusion: Optional[str] = None
    pull_requests: List[PullRequestRef] = Field(default_factory=list)


class CheckRunPayload(BaseModel):
    """check_run webhook payload."""

    action: str
    check_run: CheckRunDetails


class CheckSuiteDetails(BaseModel):
    status: Optional[str] = None
    conclusion: Optional[str] = None
    pull_requests: List[PullRequestRef] = Field(default_factory=list)


class CheckSuitePayload(BaseModel):
    """check_suite webhook payload."""

    action: str
    check_suite: CheckSuiteDetails


class Review(BaseModel):
    state: str
    user: GitHubUser


class PullRequestReviewPayload(BaseModel):
    """pull_request_review webhook payload."""

    action: str
    review: Review
    pull_request: PullRequestRef


class Comment(BaseModel):
    body: Optional[str] = None
    user: GitHubUser


class PullRequestReviewCommentPayload(BaseModel):
    """pull_request_review_comment webhook payload."""

    action: str
    comment: Comment
    pull_request: PullRequestRef


class Issue(BaseModel):
    """The issue object of an issue_comment payload.

    GitHub reports PR conversation comments as issue comments; those carry a
    ``pull_request`` object on the issue.
    """

    number: int
    pull_request: Optional[Dict[str, Any]] = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class IssueCommentPayload(BaseModel):
    """issue_comment webhook payload."""

    action: str
    comment: Comment
    issue: Issue
