"""GitHub webhook handling for monitor-pr.

This module verifies, parses and normalizes the webhook events monitor-pr
subscribes to:
- check_run, check_suite -> CIEvent
- pull_request_review -> ReviewEvent
- pull_request_review_comment, issue_comment -> CommentEvent
"""

from .dispatcher import parse_webhook_event
from .models import (
    WEBHOOK_EVENTS,
    CheckConclusion,
    CheckStatus,
    CIEvent,
    CommentEvent,
    MonitorEvent,
    ReviewAction,
    ReviewEvent,
    WebhookEventType,
)
from .normalize import normalize_conclusion, normalize_review_state, normalize_status
from .parsers import (
    parse_check_run,
    parse_check_suite,
    parse_issue_comment,
    parse_review,
    parse_review_comment,
)
from .signature import compute_signature, verify_signature

__all__ = [
    # Models
    "WEBHOOK_EVENTS",
    "CheckConclusion",
    "CheckStatus",
    "CIEvent",
    "CommentEvent",
    "MonitorEvent",
    "ReviewAction",
    "ReviewEvent",
    "WebhookEventType",
    # Normalization
    "normalize_conclusion",
    "normalize_review_state",
    "normalize_status",
    # Parsers
    "parse_check_run",
    "parse_check_suite",
    "parse_issue_comment",
    "parse_review",
    "parse_review_comment",
    "parse_webhook_event",
    # Signatures
    "compute_signature",
    "verify_signature",
]
