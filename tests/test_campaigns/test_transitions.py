"""Tests for the campaign status transition table."""

import pytest

from src.campaigns.schemas import CampaignStatus
from src.campaigns.transitions import CAMPAIGN_TRANSITIONS, can_transition, validate_transition
from src.core.errors import InvalidTransitionError


class TestCampaignTransitions:
    @pytest.mark.parametrize("src,dst", [
        ("draft", "in_review"),
        ("in_review", "approved"),
        ("approved", "sent"),
        ("draft", "failed"),
        ("approved", "failed"),
        ("failed", "draft"),
    ])
    def test_allowed(self, src, dst):
        assert can_transition(src, dst) is True
        assert validate_transition(src, dst) == (CampaignStatus(src), CampaignStatus(dst))

    @pytest.mark.parametrize("src,dst", [
        ("draft", "sent"),
        ("in_review", "draft"),
        ("sent", "failed"),
        ("sent", "draft"),
        ("draft", "draft"),
    ])
    def test_disallowed(self, src, dst):
        assert can_transition(src, dst) is False
        with pytest.raises(InvalidTransitionError):
            validate_transition(src, dst)

    def test_unknown_status(self):
        assert can_transition("draft", "published") is False
        with pytest.raises(InvalidTransitionError, match="published"):
            validate_transition("draft", "published")

    def test_sent_is_terminal(self):
        assert CAMPAIGN_TRANSITIONS[CampaignStatus.SENT] == frozenset()

    def test_every_status_has_entry(self):
        assert set(CAMPAIGN_TRANSITIONS) == set(CampaignStatus)
