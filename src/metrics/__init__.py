"""Matching engine metrics exposed in Prometheus format."""

from .prometheus_exporter import (
    REGISTRY,
    generate_metrics,
    record_booking_confirmed,
    record_match_outcome,
    record_route_request,
)

__all__ = [
    "REGISTRY",
    "generate_metrics",
    "record_booking_confirmed",
    "record_match_outcome",
    "record_route_request",
]
