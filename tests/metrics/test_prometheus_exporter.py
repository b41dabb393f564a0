from metrics.prometheus_exporter import (
    REGISTRY,
    generate_metrics,
    record_booking_confirmed,
    record_match_outcome,
    record_route_request,
)


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_route_request_counts_by_outcome():
    before = sample("route_requests_total", {"outcome": "ok"})

    record_route_request("ok", 0.2)

    assert sample("route_requests_total", {"outcome": "ok"}) == before + 1


def test_match_outcome_counters():
    before = sample("match_dropped_total")

    record_match_outcome(candidates=3, matches=2, dropped=1)

    assert sample("match_dropped_total") == before + 1


def test_booking_confirmed_by_payment_method():
    before = sample("bookings_confirmed_total", {"payment_method": "cash"})

    record_booking_confirmed("cash")

    assert sample("bookings_confirmed_total", {"payment_method": "cash"}) == before + 1


def test_exposition_only_contains_engine_metrics():
    output = generate_metrics().decode()

    assert "route_request_latency_seconds_bucket" in output
    assert "match_candidates_total" in output
    assert "python_gc_objects_collected_total" not in output
