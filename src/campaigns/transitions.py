"""Allowed campaign status transitions.

``failed`` is reachable from every state that has not been sent, and a failed
issue goes back to ``draft`` to be retried. ``sent`` is terminal.
"""

from src.campaigns.schemas import CampaignStatus
from src.core.errors import InvalidTransitionError

CAMPAIGN_TRANSITIONS: dict[CampaignStatus, frozenset[CampaignStatus]] = {
    CampaignStatus.DRAFT: frozenset({CampaignStatus.IN_REVIEW, CampaignStatus.FAILED}),
    CampaignStatus.IN_REVIEW: frozenset({CampaignStatus.APPROVED, CampaignStatus.FAILED}),
    CampaignStatus.APPROVED: frozenset({CampaignStatus.SENT, CampaignStatus.FAILED}),
    CampaignStatus.SENT: frozenset(),
    CampaignStatus.FAILED: frozenset({CampaignStatus.DRAFT}),
}


def can_transition(from_status: CampaignStatus | str, to_status: CampaignStatus | str) -> bool:
    try:
        return CampaignStatus(to_status) in CAMPAIGN_TRANSITIONS[CampaignStatus(from_status)]
    except ValueError:
        return False


def validate_transition(
    from_status: CampaignStatus | str,
    to_status: CampaignStatus | str,
) -> tuple[CampaignStatus, CampaignStatus]:
    """Coerce both statuses and check the move is allowed.

    Raises:
        InvalidTransitionError: Unknown status or disallowed move.
    """
    try:
        src = CampaignStatus(from_status)
        dst = CampaignStatus(to_status)
    except ValueError as e:
        raise InvalidTransitionError("campaign", str(from_status), str(to_status)) from e

    if not can_transition(src, dst):
        raise InvalidTransitionError("campaign", src.value, dst.value)
    return src, dst
