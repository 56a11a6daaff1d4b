"""Tests for the health endpoint."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import get_database


def _mock_db(healthy: bool = True):
    """Create a mock database."""
    db = AsyncMock()
    if healthy:
        db.health_check = AsyncMock(return_value=True)
    else:
        db.health_check = AsyncMock(side_effect=Exception("Connection refused"))
    return db


def _get_health(db_healthy: bool = True, evaluator: bool = True, slack: bool = True) -> dict:
    app = create_app()
    app.dependency_overrides[get_database] = lambda: _mock_db(db_healthy)

    rating_config = MagicMock(evaluator_configured=evaluator)
    notify_config = MagicMock(slack_enabled=slack)
    with patch("src.api.routes.health.RatingConfig", return_value=rating_config), \
         patch("src.api.routes.health.NotifyConfig", return_value=notify_config):
        with TestClient(app) as client:
            response = client.get("/health")

    assert response.status_code == 200
    return response.json()


class TestHealth:
    def test_all_healthy(self):
        data = _get_health()
        assert data["status"] == "healthy"
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["database"]["latency_ms"] is not None
        assert data["version"] == "0.1.0"

    def test_database_down(self):
        data = _get_health(db_healthy=False)
        assert data["status"] == "unhealthy"
        assert data["components"]["database"]["details"]["error"] == "Connection refused"

    @pytest.mark.parametrize("evaluator,slack,expected", [
        (False, False, "degraded"),
        (True, False, "healthy"),
        (False, True, "healthy"),
    ])
    def test_integrations(self, evaluator, slack, expected):
        data = _get_health(evaluator=evaluator, slack=slack)
        assert data["status"] == expected
        assert data["evaluator_configured"] is evaluator
        assert data["slack_configured"] is slack

    def test_no_api_key_required(self):
        app = create_app()
        app.dependency_overrides[get_database] = lambda: _mock_db()
        with patch("src.api.auth.get_settings") as settings:
            settings.return_value.api_keys = "secret"
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
                assert client.get("/admin/daily-runs").status_code == 401
