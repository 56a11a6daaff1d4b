"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import cleanup_dependencies
from src.api.middleware.timeout import TimeoutMiddleware
from src.api.routes import admin, ads, campaigns, events, health, ratings, selection
from src.config.settings import get_settings
from src.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
)
from src.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Newsletter ops API starting up")
    yield
    logger.info("Newsletter ops API shutting down")
    await cleanup_dependencies()


def _error(status_code: int, exc: Exception, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": error_type},
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP status codes."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, exc, "not_found")

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
        return _error(422, exc, "invalid_transition")

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error(422, exc, "validation")

    @app.exception_handler(UpstreamFailure)
    async def upstream_handler(request: Request, exc: UpstreamFailure):
        logger.error("Upstream failure", path=request.url.path, error=str(exc))
        return _error(502, exc, "upstream")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "selection", "description": "Daily article selection"},
        {"name": "campaigns", "description": "Campaign lifecycle and article review"},
        {"name": "events", "description": "Campaign event window population and curation"},
        {"name": "ratings", "description": "Content ratings and totals"},
        {"name": "admin", "description": "Daily-run guard inspection and reset"},
        {"name": "ads", "description": "Advertisement review workflow"},
    ]

    app = FastAPI(
        title="Newsletter Ops API",
        description="""
Backend for a local-news newsletter operations console.

## Pipeline

- **Selection**: rank the day's rated content and keep the top N as articles
- **Events**: attach active events from the campaign's three-day window
- **Daily-run guard**: each scheduled task runs at most once per calendar day

## Authentication

Requires `X-API-KEY` header for all requests except `/health`.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request timeout middleware (added before logging middleware so the
    # timeout wraps the entire request lifecycle)
    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    # Rate limiting (opt-in via RATE_LIMIT_ENABLED=true)
    if settings.rate_limit_enabled:
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        from src.api.rate_limit import limiter

        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    _register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(selection.router, tags=["selection"])
    app.include_router(campaigns.router, tags=["campaigns"])
    app.include_router(events.router, tags=["events"])
    app.include_router(ratings.router, tags=["ratings"])
    app.include_router(admin.router, tags=["admin"])
    app.include_router(ads.router, tags=["ads"])

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Newsletter Ops API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
