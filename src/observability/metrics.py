"""
Prometheus metrics for the selection and population pipeline.

Defines and exposes metrics for:
- Daily selection runs (by outcome)
- Articles selected per run
- Campaign event links created / already present / failed
- Content evaluator (LLM) calls and latency

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the newsletter pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_daily_run("completed", articles=8, latency=4.2)
        metrics.record_population(created=3, existing=5, failed=0)
    """

    def __init__(self):
        self.daily_runs = Counter(
            "newsletter_daily_runs_total",
            "Daily selection runs by outcome",
            ["outcome"],  # outcome: completed, skipped, failed
        )

        self.articles_selected = Histogram(
            "newsletter_articles_selected",
            "Number of articles selected per daily run",
            buckets=(0, 1, 3, 5, 8, 10, 12, 15, 20),
        )

        self.daily_run_latency = Histogram(
            "newsletter_daily_run_seconds",
            "Daily selection run latency",
            buckets=LATENCY_BUCKETS,
        )

        self.event_links = Counter(
            "newsletter_campaign_event_links_total",
            "Campaign event link upserts by result",
            ["result"],  # result: created, existing, failed
        )

        self.evaluator_calls = Counter(
            "newsletter_evaluator_calls_total",
            "Content evaluator calls by status",
            ["status"],  # status: success, error, circuit_open
        )

        self.evaluator_latency = Histogram(
            "newsletter_evaluator_seconds",
            "Content evaluator call latency",
            buckets=LATENCY_BUCKETS,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info("Prometheus metrics server started on port %d", port)

    def record_daily_run(
        self,
        outcome: str,
        articles: int = 0,
        latency: float | None = None,
    ) -> None:
        """Record one daily selection run."""
        self.daily_runs.labels(outcome=outcome).inc()
        if outcome == "completed":
            self.articles_selected.observe(articles)
        if latency is not None:
            self.daily_run_latency.observe(latency)

    def record_population(self, created: int, existing: int, failed: int) -> None:
        """Record the link counts of one populate run."""
        if created:
            self.event_links.labels(result="created").inc(created)
        if existing:
            self.event_links.labels(result="existing").inc(existing)
        if failed:
            self.event_links.labels(result="failed").inc(failed)

    def record_evaluation(self, status: str, latency: float | None = None) -> None:
        """Record one content evaluator call."""
        self.evaluator_calls.labels(status=status).inc()
        if latency is not None:
            self.evaluator_latency.observe(latency)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
