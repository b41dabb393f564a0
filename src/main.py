"""
Trip Matching Engine - Entry Point

Loads configuration and the driver snapshot, then serves the booking API.
Configuration problems are reported once and the process exits non-zero.
"""

import logging
import sys

import uvicorn

from api.app import create_app
from core.exceptions import ConfigurationError
from domain import Booking
from engine_logging import setup_logging
from geo.route_client import RouteClient
from reference_data import initial_wallet, load_drivers
from settings import load_settings

logger = logging.getLogger(__name__)


def log_booking(booking: Booking) -> None:
    """Default booking consumer: bookings are not persisted beyond the log."""
    logger.info(
        f"Booking handed off: driver {booking.driver.id}, "
        f"{booking.route.distance_meters:.0f}m, {booking.price} VND ({booking.payment_method.value})"
    )


def main() -> None:
    """Main entry point - validates configuration and runs the API server."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Configuration error: {e.message} {e.details.get('errors', [])}")
        sys.exit(1)

    setup_logging(
        level=settings.engine.log_level,
        json_output=settings.engine.log_format == "json",
        environment=settings.engine.environment,
    )

    try:
        drivers = load_drivers(settings.engine.drivers_file)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        sys.exit(1)

    route_client = RouteClient(
        settings.routing.base_url,
        settings.routing.access_token,
        profile=settings.routing.profile,
        timeout=settings.routing.timeout_seconds,
    )
    logger.info(f"Directions client configured: {settings.routing.base_url} ({settings.routing.profile})")

    app = create_app(
        route_client,
        drivers,
        initial_wallet(settings.wallet),
        settings,
        booking_consumer=log_booking,
    )

    logger.info(f"Starting trip matching engine on port {settings.engine.api_port}")
    uvicorn.run(
        app,
        host=settings.engine.api_host,
        port=settings.engine.api_port,
        log_level=settings.engine.log_level.lower(),
    )


if __name__ == "__main__":
    main()
