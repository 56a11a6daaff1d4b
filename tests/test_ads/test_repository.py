"""Tests for the advertisement review workflow."""

import pytest

from src.ads.repository import AdRepository
from src.ads.schemas import AD_TRANSITIONS, AdStatus
from src.core.errors import InvalidTransitionError, NotFoundError, ValidationError

AD_ID = "3b0c6f3e-5d7a-4d19-8f44-9e1f2a7c0b22"


def _ad_row(status="pending", **kwargs) -> dict:
    row = {
        "id": AD_ID,
        "title": "Fall sale at Main St Hardware",
        "body": "20% off",
        "status": status,
        "approved_by": None,
        "approved_at": None,
        "rejection_reason": None,
        "created_at": None,
        "updated_at": None,
    }
    row.update(kwargs)
    return row


@pytest.fixture
def repo(mock_database):
    return AdRepository(mock_database)


class TestTransitionTable:
    def test_terminal_states(self):
        assert AD_TRANSITIONS[AdStatus.REJECTED] == frozenset()
        assert AD_TRANSITIONS[AdStatus.COMPLETED] == frozenset()

    def test_pending_choices(self):
        assert AD_TRANSITIONS[AdStatus.PENDING] == {AdStatus.APPROVED, AdStatus.REJECTED}


class TestTransition:
    async def test_approve_records_reviewer(self, repo, mock_database):
        mock_database.fetchrow.side_effect = [
            _ad_row(),
            _ad_row("approved", approved_by="editor@example.com"),
        ]

        ad = await repo.transition(AD_ID, "approved", approved_by="editor@example.com")

        assert ad.status == AdStatus.APPROVED
        assert ad.approved_by == "editor@example.com"
        args = mock_database.fetchrow.call_args[0]
        assert "WHERE id = $1 AND status = $3" in args[0]
        assert args[1:] == (AD_ID, "approved", "pending", "editor@example.com", None)

    async def test_approve_requires_reviewer(self, repo, mock_database):
        mock_database.fetchrow.return_value = _ad_row()
        with pytest.raises(ValidationError, match="approved_by"):
            await repo.transition(AD_ID, AdStatus.APPROVED)

    async def test_reject_with_reason(self, repo, mock_database):
        mock_database.fetchrow.side_effect = [
            _ad_row(),
            _ad_row("rejected", rejection_reason="Misleading claim"),
        ]
        ad = await repo.transition(AD_ID, AdStatus.REJECTED, reason="Misleading claim")
        assert ad.rejection_reason == "Misleading claim"

    async def test_cannot_skip_approval(self, repo, mock_database):
        mock_database.fetchrow.return_value = _ad_row()
        with pytest.raises(InvalidTransitionError, match="'pending' -> 'active'"):
            await repo.transition(AD_ID, AdStatus.ACTIVE)

    async def test_unknown_status(self, repo, mock_database):
        mock_database.fetchrow.return_value = _ad_row()
        with pytest.raises(InvalidTransitionError):
            await repo.transition(AD_ID, "archived")

    async def test_missing_ad(self, repo, mock_database):
        with pytest.raises(NotFoundError, match="Advertisement"):
            await repo.transition(AD_ID, AdStatus.APPROVED, approved_by="x")

    async def test_concurrent_change(self, repo, mock_database):
        mock_database.fetchrow.side_effect = [_ad_row("approved"), None]
        with pytest.raises(InvalidTransitionError):
            await repo.transition(AD_ID, AdStatus.ACTIVE)
