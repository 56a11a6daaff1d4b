"""
Command-line interface for newsletter-ops.

Provides commands to run the daily selection pipeline, populate campaign
events, administer the daily-run guard, serve the API, and run diagnostic
checks.

Usage:
    newsletter-ops init-db                     # Initialize database
    newsletter-ops serve                       # Start the API server
    newsletter-ops run-daily                   # Daily article selection
    newsletter-ops populate-events CAMPAIGN_ID # Attach a campaign's events
    newsletter-ops guard-status                # Last run per scheduled task
    newsletter-ops reset-guard TASK_KEY        # Force a task to run again
    newsletter-ops recalculate-scores          # Rewrite stored rating totals
    newsletter-ops health                      # Check service health
"""

import asyncio
import sys
from typing import Any

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Newsletter Ops - article selection and campaign population."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from src.storage.database import Database
    from src.storage.schema import init_schema

    async def run():
        db = Database()
        await db.connect()
        try:
            await init_schema(db)
            click.echo("Database initialized successfully")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command("run-daily")
@click.option("--date", "target_date", default=None, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Issue date (default: today in the configured timezone)")
@click.option("--force", is_flag=True, help="Run even if already recorded for the date")
def run_daily(target_date: Any, force: bool) -> None:
    """Run daily article selection and event population.

    Claims the day in the daily-run guard, ranks the day's rated content into
    the campaign's articles, attaches the event window, and notifies Slack.

    Designed for cron scheduling: 0 5 * * * newsletter-ops run-daily

    Example:
        newsletter-ops run-daily                    # Today
        newsletter-ops run-daily --date 2025-10-04  # Specific date
        newsletter-ops run-daily --force            # Ignore the guard
    """
    from src.selection.daily_job import run_daily_selection
    from src.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            d = target_date.date() if target_date else None
            result = await run_daily_selection(db, target_date=d, force=force)

            if result.skipped:
                click.echo(f"Daily selection already ran for {result.date}; use --force to rerun.")
                return

            click.echo(f"\nDaily Selection Results ({result.date}):")
            click.echo(f"  Campaign:           {result.campaign_id}"
                       f"{' (created)' if result.campaign_created else ''}")
            click.echo(f"  Status:             {result.campaign_status}")
            click.echo(f"  Candidates:         {result.candidates}")
            click.echo(f"  Newly rated:        {result.evaluated}")
            click.echo(f"  Duplicates dropped: {result.duplicates_removed}")
            click.echo(f"  Articles selected:  {len(result.selected)}")
            click.echo(f"  Deactivated:        {result.articles_deactivated}")
            if result.events:
                click.echo(f"  Events linked:      {result.events.links_created} new, "
                           f"{result.events.links_existing} existing")
            click.echo(f"  Notified:           {result.notified}")
            click.echo(f"  Errors:             {len(result.errors)}")
            click.echo(f"  Elapsed:            {result.elapsed_seconds:.2f}s")

            if result.errors:
                click.echo("\nErrors:")
                for err in result.errors:
                    click.echo(click.style(f"  - {err}", fg="red"))
                sys.exit(1)
        finally:
            await db.close()

    asyncio.run(run())


@main.command("populate-events")
@click.argument("campaign_id")
def populate_events(campaign_id: str) -> None:
    """Attach active events in a campaign's three-day window.

    Safe to re-run; existing links keep their selection and featured flags.
    """
    from src.core.errors import NotFoundError
    from src.events.populator import populate_events_for_campaign
    from src.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            try:
                result = await populate_events_for_campaign(db, campaign_id)
            except NotFoundError as e:
                click.echo(click.style(str(e), fg="red"))
                sys.exit(1)

            window = ", ".join(d.isoformat() for d in result.dates)
            click.echo(f"\nEvent population for campaign {campaign_id}")
            click.echo(f"  Window:         {window}")
            click.echo(f"  Events found:   {result.events_found}")
            click.echo(f"  Links created:  {result.links_created}")
            click.echo(f"  Already linked: {result.links_existing}")
            click.echo(f"  Failed:         {result.links_failed}")

            if result.errors:
                click.echo("\nErrors:")
                for err in result.errors:
                    click.echo(click.style(f"  - {err}", fg="red"))
                sys.exit(1)
        finally:
            await db.close()

    asyncio.run(run())


@main.command("guard-status")
def guard_status() -> None:
    """Show the last recorded run date of each scheduled task."""
    from src.scheduling.guard import DailyRunGuard
    from src.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            status = await DailyRunGuard(db).status()
            click.echo("\nDaily-run guard:")
            for key, value in status.items():
                click.echo(f"  {key:<32} {value or 'never'}")
        finally:
            await db.close()

    asyncio.run(run())


@main.command("reset-guard")
@click.argument("task_key")
def reset_guard(task_key: str) -> None:
    """Reset a task's daily-run guard so its next invocation runs."""
    from src.scheduling.guard import TASK_KEYS, DailyRunGuard
    from src.storage.database import Database

    if task_key not in TASK_KEYS:
        click.echo(click.style(
            f"Unknown task key {task_key!r}. Known keys: {', '.join(TASK_KEYS)}", fg="red",
        ))
        sys.exit(2)

    async def run():
        db = Database()
        await db.connect()

        try:
            await DailyRunGuard(db).reset(task_key)
            click.echo(f"Reset {task_key}; it will run on its next invocation.")
        finally:
            await db.close()

    asyncio.run(run())


@main.command("recalculate-scores")
def recalculate_scores() -> None:
    """Rewrite stored rating totals under the configured weights."""
    from src.rating.accessor import RatingAccessor
    from src.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            accessor = RatingAccessor(db)
            result = await accessor.recalculate_totals()
            weights = accessor.weights or "equal"

            click.echo(f"\nRecalculated totals (weights: {weights}):")
            click.echo(f"  Ratings:  {result.total}")
            click.echo(f"  Updated:  {result.updated}")
            click.echo(f"  Skipped:  {result.skipped}")
            click.echo(f"  Errors:   {result.errors}")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog
    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            from src.storage.database import Database
            db = Database()
            await db.connect()
            results["postgres"] = await db.health_check()
            await db.close()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        from src.notifications.config import NotifyConfig
        from src.rating.config import RatingConfig

        results["evaluator_configured"] = RatingConfig().evaluator_configured
        results["slack_configured"] = NotifyConfig().slack_enabled

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))

        click.echo("-" * 40)

        if results["postgres"]:
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


if __name__ == "__main__":
    main()
