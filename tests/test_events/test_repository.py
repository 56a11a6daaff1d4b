"""Tests for EventRepository and CampaignEventRepository SQL."""

from datetime import date, datetime

import pytest

from src.core.errors import ConflictIgnorable, NotFoundError, ValidationError
from src.events.repository import CampaignEventRepository, EventRepository

WINDOW = [date(2025, 10, 4), date(2025, 10, 5), date(2025, 10, 6)]


def _event_row(event_id=10, start=datetime(2025, 10, 4, 19, 0), **kwargs) -> dict:
    return {
        "id": event_id,
        "title": kwargs.get("title", "Farmers market"),
        "venue": kwargs.get("venue", "Town square"),
        "start_date": start,
        "end_date": kwargs.get("end_date"),
        "active": kwargs.get("active", True),
    }


def _link_row(**kwargs) -> dict:
    row = {
        "id": 1,
        "campaign_id": "camp-1",
        "event_id": 10,
        "event_date": date(2025, 10, 4),
        "is_selected": False,
        "is_featured": False,
        "display_order": 1,
    }
    row.update(kwargs)
    return row


class TestEventRepository:
    @pytest.fixture
    def repo(self, mock_database):
        return EventRepository(mock_database)

    async def test_window_query_matches_calendar_days(self, repo, mock_database):
        mock_database.fetch.return_value = [
            _event_row(10, datetime(2025, 10, 4, 23, 59)),
            _event_row(11, datetime(2025, 10, 6, 0, 0)),
        ]

        events = await repo.get_active_in_window(WINDOW)

        assert [e.id for e in events] == [10, 11]
        assert events[0].start_day == date(2025, 10, 4)
        sql, dates = mock_database.fetch.call_args[0]
        assert "active = TRUE" in sql
        assert "start_date::date = ANY($1::date[])" in sql
        assert "ORDER BY start_date ASC, id ASC" in sql
        assert dates == WINDOW

    async def test_empty_window_skips_query(self, repo, mock_database):
        assert await repo.get_active_in_window([]) == []
        mock_database.fetch.assert_not_called()


class TestInsertLink:
    @pytest.fixture
    def repo(self, mock_database):
        return CampaignEventRepository(mock_database)

    async def test_inserts_with_next_display_order(self, repo, mock_database):
        mock_database.fetchrow.return_value = _link_row(display_order=3)

        link = await repo.insert_link("camp-1", 10, date(2025, 10, 4))

        assert link.display_order == 3
        assert link.is_selected is False
        assert link.is_featured is False
        sql = mock_database.fetchrow.call_args[0][0]
        assert "ON CONFLICT (campaign_id, event_id, event_date) DO NOTHING" in sql
        assert "MAX(display_order)" in sql
        assert mock_database.fetchrow.call_args[0][1:] == ("camp-1", 10, date(2025, 10, 4))

    async def test_existing_link_raises_conflict(self, repo, mock_database):
        mock_database.fetchrow.return_value = None
        with pytest.raises(ConflictIgnorable):
            await repo.insert_link("camp-1", 10, date(2025, 10, 4))


class TestListForCampaign:
    async def test_joins_event_details(self, mock_database):
        mock_database.fetch.return_value = [
            {**_link_row(), "title": "Farmers market", "venue": None,
             "start_date": datetime(2025, 10, 4, 8, 0), "end_date": None, "active": True},
        ]

        links = await CampaignEventRepository(mock_database).list_for_campaign("camp-1")

        assert links[0].event.title == "Farmers market"
        assert links[0].to_dict()["event"]["start_date"] == "2025-10-04T08:00:00"
        sql = mock_database.fetch.call_args[0][0]
        assert "JOIN events" in sql
        assert "display_order ASC NULLS LAST" in sql


class TestUpdateFlags:
    @pytest.fixture
    def repo(self, mock_database):
        return CampaignEventRepository(mock_database)

    async def test_partial_update(self, repo, mock_database):
        mock_database.fetchrow.return_value = _link_row(is_featured=True)

        link = await repo.update_flags("camp-1", 10, date(2025, 10, 4), is_featured=True)

        assert link.is_featured is True
        args = mock_database.fetchrow.call_args[0]
        assert "COALESCE($5, is_featured)" in args[0]
        assert args[1:] == ("camp-1", 10, date(2025, 10, 4), None, True, None)

    async def test_nothing_to_update(self, repo, mock_database):
        with pytest.raises(ValidationError):
            await repo.update_flags("camp-1", 10, date(2025, 10, 4))
        mock_database.fetchrow.assert_not_called()

    async def test_missing_link(self, repo, mock_database):
        mock_database.fetchrow.return_value = None
        with pytest.raises(NotFoundError, match="2025-10-04"):
            await repo.update_flags("camp-1", 10, date(2025, 10, 4), is_selected=True)
