"""
FastAPI service for newsletter operations.

Provides REST API for:
- POST /selection/run - Daily article selection
- /campaigns, /articles - Campaign review and lifecycle
- /campaigns/{id}/events - Event window population and curation
- /ratings - Rating lookup and total recalculation
- /admin/daily-runs - Daily-run guard inspection and reset
- /ads - Advertisement review workflow
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
