"""Normalization helpers for webhook payload values.

GitHub reports statuses, conclusions and review states as free-form strings.
These helpers map them onto the closed enums of the normalized events.
Unrecognized check statuses map to IN_PROGRESS and unrecognized review
states map to COMMENTED, since GitHub may introduce new values at any time.
"""

from typing import Optional

from .models import CheckConclusion, CheckStatus, ReviewAction


def normalize_status(status: Optional[str]) -> CheckStatus:
    """Map a check status string onto CheckStatus.

    Args:
        status: Raw status from the payload, compared case-insensitively.

    Returns:
        The matching CheckStatus, or IN_PROGRESS when unrecognized.
    """
    try:
        return CheckStatus((status or "").lower())
    except ValueError:
        return CheckStatus.IN_PROGRESS


def normalize_conclusion(conclusion: Optional[str]) -> Optional[CheckConclusion]:
    """Map a check conclusion string onto CheckConclusion.

    Args:
        conclusion: Raw conclusion from the payload. May be None or empty
                    while the check is still running.

    Returns:
        The matching CheckConclusion, or None when absent or unrecognized.
    """
    if not conclusion:
        return None
    try:
        return CheckConclusion(conclusion.lower())
    except ValueError:
        return None


def normalize_review_state(state: str, action: str) -> ReviewAction:
    """Map a review state and webhook action onto ReviewAction.

    A dismissed review is reported as DISMISSED whatever its state was.

    Args:
        state: Review state from the payload (e.g. "APPROVED").
        action: Webhook action ("submitted" or "dismissed").

    Returns:
        The ReviewAction for the event.
    """
    if action == "dismissed":
        return ReviewAction.DISMISSED

    normalized = (state or "").lower()
    if normalized == ReviewAction.APPROVED.value:
        return ReviewAction.APPROVED
    if normalized == ReviewAction.CHANGES_REQUESTED.value:
        return ReviewAction.CHANGES_REQUESTED
    return ReviewAction.COMMENTED
