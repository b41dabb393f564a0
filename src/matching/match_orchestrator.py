"""Match orchestrator: combined-route fan-out and ranking of candidate drivers."""

import logging
from collections.abc import Sequence
from typing import Protocol

from domain import Driver, Match
from geo.route_client import RouteFailure, RouteOutcome
from matching.candidate_filter import DEFAULT_THRESHOLD_KM, find_candidates
from metrics import record_match_outcome
from utils.async_helpers import gather_settled

logger = logging.getLogger(__name__)

DEFAULT_MAX_MATCHES = 5
DEFAULT_MAX_CONCURRENT_REQUESTS = 8


class RouteFetcher(Protocol):
    async def fetch_route(self, waypoints: Sequence[tuple[float, float]]) -> RouteOutcome: ...


def combined_waypoints(
    driver: Driver,
    rider_start: tuple[float, float],
    rider_end: tuple[float, float],
) -> list[tuple[float, float]]:
    """Driver's current location, then rider pickup, then rider destination."""
    return [driver.current_location.coordinates, rider_start, rider_end]


def rank_matches(matches: Sequence[Match], limit: int = DEFAULT_MAX_MATCHES) -> list[Match]:
    """Shortest combined distance first; ties keep their filter order (stable sort)."""
    return sorted(matches, key=lambda match: match.total_distance_km)[:limit]


class MatchOrchestrator:
    """Finds and ranks drivers whose routes can absorb the rider's trip.

    Every candidate gets one combined-route request. Requests run
    concurrently (bounded by ``max_concurrent_requests``) and the
    orchestrator waits for all of them to settle before ranking. A failed
    request drops only its candidate; there are no retries.
    """

    def __init__(
        self,
        route_client: RouteFetcher,
        threshold_km: float = DEFAULT_THRESHOLD_KM,
        max_matches: int = DEFAULT_MAX_MATCHES,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
    ):
        self._route_client = route_client
        self._threshold_km = threshold_km
        self._max_matches = max_matches
        self._max_concurrent_requests = max_concurrent_requests

    async def match_drivers(
        self,
        rider_start: tuple[float, float],
        rider_end: tuple[float, float],
        drivers: Sequence[Driver],
    ) -> list[Match]:
        candidates = find_candidates(rider_start, rider_end, drivers, self._threshold_km)
        logger.info(
            f"Found {len(candidates)} candidates out of {len(drivers)} drivers "
            f"(threshold {self._threshold_km}km)"
        )
        if not candidates:
            record_match_outcome(candidates=0, matches=0, dropped=0)
            return []

        async def fetch_combined_route(driver: Driver) -> RouteOutcome:
            return await self._route_client.fetch_route(
                combined_waypoints(driver, rider_start, rider_end)
            )

        outcomes = await gather_settled(
            fetch_combined_route, candidates, limit=self._max_concurrent_requests
        )

        matches: list[Match] = []
        for driver, outcome in zip(candidates, outcomes, strict=True):
            if isinstance(outcome, RouteFailure):
                logger.warning(f"Dropping driver {driver.id}: combined route failed ({outcome.reason})")
                continue
            if isinstance(outcome, BaseException):
                logger.error(f"Dropping driver {driver.id}: route request raised {outcome!r}")
                continue
            matches.append(Match.from_route(driver, outcome))

        ranked = rank_matches(matches, self._max_matches)
        dropped = len(candidates) - len(matches)
        record_match_outcome(candidates=len(candidates), matches=len(ranked), dropped=dropped)
        logger.info(
            f"Ranked {len(ranked)} matches ({len(matches)} routed, {dropped} dropped)"
        )
        return ranked
