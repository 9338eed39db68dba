from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bakery.config import Settings, get_settings
from bakery.infrastructure import database
from bakery.infrastructure.activity import (
    ActivityBatcher,
    ActivityTransport,
    HttpActivityTransport,
)
from bakery.infrastructure.rate_limiter import RateWindow
from bakery.interfaces.api.middleware import ActivityTrackingMiddleware
from bakery.interfaces.api.routes import register_routes


def build_activity_batcher(
    settings: Settings, transport: ActivityTransport | None = None
) -> ActivityBatcher | None:
    """Create the outbound activity batcher, or ``None`` when no collector is set."""

    if transport is None:
        if not settings.activity_collector_url:
            return None
        transport = HttpActivityTransport(
            settings.activity_collector_url,
            timeout=settings.activity_request_timeout_seconds,
            beacon_timeout=settings.activity_beacon_timeout_seconds,
        )

    return ActivityBatcher(
        transport,
        batch_size=settings.activity_batch_size,
        flush_interval=settings.activity_flush_interval_ms / 1000,
        enabled=settings.activity_tracking_enabled,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, run the activity flush timer and drain it on shutdown."""

    database.initialize_database()
    batcher: ActivityBatcher | None = app.state.activity_batcher
    if batcher is not None:
        batcher.start()
    try:
        yield
    finally:
        if batcher is not None:
            await batcher.shutdown()
            transport = batcher.transport
            if isinstance(transport, HttpActivityTransport):
                await transport.aclose()
        database.engine.dispose()


def create_app(
    *,
    settings: Settings | None = None,
    activity_transport: ActivityTransport | None = None,
    rate_window: RateWindow | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The rate window and the activity batcher live for the whole process and
    are shared by every request through ``app.state``.
    """

    settings = settings or get_settings()

    app = FastAPI(title="Bakery API", lifespan=lifespan)
    app.state.rate_window = rate_window or RateWindow()
    app.state.activity_batcher = build_activity_batcher(settings, activity_transport)

    app.add_middleware(ActivityTrackingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
