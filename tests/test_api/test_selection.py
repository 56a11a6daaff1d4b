"""Tests for the daily selection trigger endpoint."""

from datetime import date
from unittest.mock import AsyncMock, patch

from src.selection.daily_job import DailySelectionResult
from src.selection.selector import ScoredItem
from tests.conftest import _make_item
from tests.test_api.conftest import CAMPAIGN_ID

RUN = "src.api.routes.selection.run_daily_selection"


def _result(**kwargs) -> DailySelectionResult:
    return DailySelectionResult(date=date(2025, 10, 4), **kwargs)


class TestRunSelection:
    def test_run_with_defaults(self, client, mock_db):
        result = _result(
            campaign_id=CAMPAIGN_ID,
            campaign_status="in_review",
            candidates=3,
            duplicates_removed=1,
            selected=[ScoredItem(_make_item("p1", (8, 8, 9)), 25)],
        )
        with patch(RUN, AsyncMock(return_value=result)) as run:
            response = client.post("/selection/run")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["skipped"] is False
        assert data["duplicates_removed"] == 1
        assert data["selected"] == [{"post_id": "p1", "title": "Story p1", "total_score": 25}]
        run.assert_awaited_once_with(mock_db, target_date=None, force=False)

    def test_run_for_date_with_force(self, client, mock_db):
        with patch(RUN, AsyncMock(return_value=_result())) as run:
            response = client.post("/selection/run", json={"date": "2025-10-04", "force": True})

        assert response.status_code == 200
        run.assert_awaited_once_with(mock_db, target_date="2025-10-04", force=True)

    def test_already_ran(self, client):
        with patch(RUN, AsyncMock(return_value=_result(skipped=True))):
            response = client.post("/selection/run")

        assert response.json()["skipped"] is True
        assert response.json()["selected"] == []

    def test_errors_reported(self, client):
        with patch(RUN, AsyncMock(return_value=_result(errors=["snapshot: timeout"]))):
            response = client.post("/selection/run")

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["errors"] == ["snapshot: timeout"]
