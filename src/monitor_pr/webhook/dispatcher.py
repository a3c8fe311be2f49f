"""Routing of raw webhook payloads to their normalizers.

The dispatcher looks the X-GitHub-Event value up in a table keyed by
WebhookEventType, validates the payload against the matching Pydantic model
and hands the result to the parser. Unknown event types and payloads that
fail validation produce no event, so new or unexpected deliveries from
GitHub never break the server.

Source:
- src/monitor_pr/webhook/models.py (payload models, MonitorEvent)
- src/monitor_pr/webhook/parsers.py (per-payload parsers)
"""

import logging
from typing import AbstractSet, Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from .models import (
    CheckRunPayload,
    CheckSuitePayload,
    IssueCommentPayload,
    MonitorEvent,
    PullRequestReviewCommentPayload,
    PullRequestReviewPayload,
    WebhookEventType,
)
from .parsers import (
    parse_check_run,
    parse_check_suite,
    parse_issue_comment,
    parse_review,
    parse_review_comment,
)

logger = logging.getLogger(__name__)

EventParser = Callable[[Any, int, AbstractSet[int]], Optional[MonitorEvent]]

EVENT_PARSERS: Dict[WebhookEventType, Tuple[Type[BaseModel], EventParser]] = {
    WebhookEventType.CHECK_RUN: (CheckRunPayload, parse_check_run),
    WebhookEventType.CHECK_SUITE: (CheckSuitePayload, parse_check_suite),
    WebhookEventType.PULL_REQUEST_REVIEW: (PullRequestReviewPayload, parse_review),
    WebhookEventType.PULL_REQUEST_REVIEW_COMMENT: (
        PullRequestReviewCommentPayload,
        parse_review_comment,
    ),
    WebhookEventType.ISSUE_COMMENT: (IssueCommentPayload, parse_issue_comment),
}


def _parse_event_type(event_type: str) -> Optional[WebhookEventType]:
    """Parse the X-GitHub-Event header value into a WebhookEventType.

    Args:
        event_type: The header value.

    Returns:
        WebhookEventType if supported, None otherwise.
    """
    try:
        return WebhookEventType(event_type)
    except ValueError:
        return None


def parse_webhook_event(
    event_type: str,
    payload: Any,
    target_pr: int,
    linked_issues: AbstractSet[int],
) -> Optional[MonitorEvent]:
    """Convert any supported webhook payload into a MonitorEvent.

    Args:
        event_type: Value of the X-GitHub-Event header.
        payload: Decoded JSON body of the delivery.
        target_pr: Number of the monitored pull request.
        linked_issues: Issue numbers whose comments are also reported.

    Returns:
        The normalized event, or None when the event type is unsupported,
        the payload is malformed, or the event does not concern the
        monitored PR or its linked issues.
    """
    webhook_event_type = _parse_event_type(event_type)
    if webhook_event_type is None:
        logger.debug("Ignoring unsupported event type: %s", event_type)
        return None

    payload_model, parser = EVENT_PARSERS[webhook_event_type]

    try:
        parsed_payload = payload_model.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "Ignoring malformed %s payload: %d validation error(s)",
            webhook_event_type.value,
            exc.error_count(),
        )
        return None

    return parser(parsed_payload, target_pr, linked_issues)
