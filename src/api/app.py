"""FastAPI application factory for the booking API."""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from api.errors import register_exception_handlers
from api.routes import health, sessions
from api.sessions import SessionRegistry
from booking.flow import BookingConsumer
from domain import Driver, Wallet
from matching.match_orchestrator import RouteFetcher
from settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    route_client: RouteFetcher,
    drivers: Sequence[Driver],
    wallet: Wallet,
    settings: Settings,
    booking_consumer: BookingConsumer | None = None,
) -> FastAPI:
    """Create FastAPI application with injected dependencies.

    Args:
        route_client: Directions client shared by every session
        drivers: Read-only driver snapshot
        wallet: Rider's starting wallet; each session debits its own copy
        settings: Loaded engine settings
        booking_consumer: Called with every confirmed booking (optional)
    """
    registry = SessionRegistry(
        route_client,
        drivers,
        wallet,
        settings,
        booking_consumer=booking_consumer,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        """Release every session's map state on shutdown."""
        yield
        registry.close_all()

    app = FastAPI(
        title="Trip Matching Engine API",
        version="1.0.0",
        description="Booking sessions: location selection, driver matching and confirmation",
        lifespan=lifespan,
    )

    # Set immediately (not in lifespan) so they're available for testing
    app.state.registry = registry
    app.state.settings = settings

    register_exception_handlers(app)

    app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
    app.include_router(health.router, tags=["health"])

    logger.info(f"API ready with {registry.driver_count} drivers")
    return app
