"""Tests for the Prometheus metrics collector."""

from prometheus_client import REGISTRY

from src.observability.metrics import get_metrics


def _value(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_daily_run_outcomes(self):
        metrics = get_metrics()
        before = _value("newsletter_daily_runs_total", {"outcome": "skipped"})
        observed = _value("newsletter_articles_selected_count")

        metrics.record_daily_run("skipped", latency=0.01)

        assert _value("newsletter_daily_runs_total", {"outcome": "skipped"}) == before + 1
        # Article counts are only observed for completed runs
        assert _value("newsletter_articles_selected_count") == observed

    def test_population_counts(self):
        metrics = get_metrics()
        created = _value("newsletter_campaign_event_links_total", {"result": "created"})
        existing = _value("newsletter_campaign_event_links_total", {"result": "existing"})

        metrics.record_population(created=2, existing=3, failed=0)

        assert _value("newsletter_campaign_event_links_total", {"result": "created"}) == created + 2
        assert _value("newsletter_campaign_event_links_total", {"result": "existing"}) == existing + 3
