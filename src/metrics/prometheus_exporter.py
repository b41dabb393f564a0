"""Prometheus metrics for routing and matching.

Metrics live in a dedicated registry so the default process collectors are
not exported alongside them.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Use a separate registry to avoid default Python metrics
REGISTRY = CollectorRegistry()

# --- Routing ---

route_requests_total = Counter(
    "route_requests_total",
    "Directions service requests by outcome",
    ["outcome"],
    registry=REGISTRY,
)

route_request_latency = Histogram(
    "route_request_latency_seconds",
    "Directions service request latency in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# --- Matching ---

match_candidates_total = Counter(
    "match_candidates_total",
    "Drivers that passed the geographic pre-filter",
    registry=REGISTRY,
)

match_results_total = Counter(
    "match_results_total",
    "Ranked matches returned to riders",
    registry=REGISTRY,
)

match_dropped_total = Counter(
    "match_dropped_total",
    "Candidates dropped because their combined route failed",
    registry=REGISTRY,
)

# --- Booking ---

bookings_confirmed_total = Counter(
    "bookings_confirmed_total",
    "Confirmed bookings by payment method",
    ["payment_method"],
    registry=REGISTRY,
)


def record_route_request(outcome: str, latency_seconds: float) -> None:
    route_requests_total.labels(outcome=outcome).inc()
    route_request_latency.observe(latency_seconds)


def record_match_outcome(candidates: int, matches: int, dropped: int) -> None:
    match_candidates_total.inc(candidates)
    match_results_total.inc(matches)
    match_dropped_total.inc(dropped)


def record_booking_confirmed(payment_method: str) -> None:
    bookings_confirmed_total.labels(payment_method=payment_method).inc()


def generate_metrics() -> bytes:
    """Generate Prometheus text format output for the engine registry."""
    return generate_latest(REGISTRY)
