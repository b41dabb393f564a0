import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from core.exceptions import (
    NetworkError,
    ServiceUnavailableError,
    ValidationError,
)
from domain import RouteResult
from metrics import record_route_request

logger = logging.getLogger(__name__)

FailureReason = Literal[
    "no_route",
    "rejected",
    "service_unavailable",
    "timeout",
    "network",
    "invalid_response",
]


class NoRouteFoundError(ValidationError):
    """No route found between waypoints. Inherits from ValidationError (non-retryable)."""

    pass


class RouteRejectedError(ValidationError):
    """Directions service answered with a non-Ok code (bad input, bad token, ...)."""

    pass


class RouteServiceError(ServiceUnavailableError):
    """Directions service error (5xx) or unparseable response."""

    pass


class InvalidRouteResponseError(RouteServiceError):
    """Directions response could not be parsed."""

    pass


class RouteTimeoutError(NetworkError):
    """Directions request timeout."""

    pass


@dataclass(frozen=True)
class RouteFailure:
    """Tagged failure returned by RouteClient.fetch_route instead of raising."""

    reason: FailureReason
    message: str
    code: str | None = None


RouteOutcome = RouteResult | RouteFailure


def format_waypoints(waypoints: Sequence[tuple[float, float]]) -> str:
    """Serialize (lon, lat) waypoints as 'lon,lat;lon,lat;...' in order."""
    return ";".join(f"{lon},{lat}" for lon, lat in waypoints)


class RouteClient:
    """Client for a Mapbox-Directions-compatible driving directions service.

    Geometry is requested as GeoJSON so coordinates come back as (lon, lat)
    pairs rather than an encoded polyline. Distances and durations are
    returned as the service reports them, in meters and seconds.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        profile: str = "driving",
        timeout: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.profile = profile
        self.timeout = timeout

    def _build_url(self, waypoints: Sequence[tuple[float, float]]) -> str:
        return (
            f"{self.base_url}/directions/v5/mapbox/{self.profile}/"
            f"{format_waypoints(waypoints)}"
        )

    async def get_route(self, waypoints: Sequence[tuple[float, float]]) -> RouteResult:
        """Get a route visiting the waypoints in order. Raises on any failure."""
        if len(waypoints) < 2:
            raise ValidationError(
                "At least two waypoints are required to compute a route",
                details={"waypoints": len(waypoints)},
            )

        url = self._build_url(waypoints)
        params = {
            "geometries": "geojson",
            "overview": "full",
            "access_token": self.access_token,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise RouteTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}") from e

        if response.status_code >= 500:
            raise RouteServiceError(f"Directions server error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidRouteResponseError(
                f"Directions response is not JSON (status {response.status_code})"
            ) from e

        return self._parse_response(data, response.status_code)

    def _parse_response(self, data: Any, status_code: int) -> RouteResult:
        if not isinstance(data, dict):
            raise InvalidRouteResponseError("Directions response is not a JSON object")

        code = data.get("code")
        if code == "NoRoute":
            raise NoRouteFoundError("No route found between waypoints", details={"code": code})
        if code != "Ok":
            raise RouteRejectedError(
                data.get("message") or f"Directions request rejected (status {status_code})",
                details={"code": code, "status": status_code},
            )

        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFoundError("Directions response contained no routes", details={"code": code})

        route = routes[0]
        try:
            return RouteResult(
                geometry=tuple(
                    (float(lon), float(lat)) for lon, lat, *_ in route["geometry"]["coordinates"]
                ),
                distance_meters=float(route["distance"]),
                duration_seconds=float(route["duration"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidRouteResponseError(f"Malformed route in directions response: {e}") from e

    async def fetch_route(self, waypoints: Sequence[tuple[float, float]]) -> RouteOutcome:
        """Fetch a route, returning a RouteFailure instead of raising.

        Callers treat a failure as non-fatal: the matching pipeline drops the
        candidate, the booking flow reports it to the rider.
        """
        start_time = time.perf_counter()
        outcome: RouteOutcome
        try:
            outcome = await self.get_route(waypoints)
        except NoRouteFoundError as e:
            outcome = RouteFailure("no_route", e.message, code=e.details.get("code"))
        except RouteRejectedError as e:
            outcome = RouteFailure("rejected", e.message, code=e.details.get("code"))
        except RouteTimeoutError as e:
            outcome = RouteFailure("timeout", e.message)
        except InvalidRouteResponseError as e:
            outcome = RouteFailure("invalid_response", e.message)
        except RouteServiceError as e:
            outcome = RouteFailure("service_unavailable", e.message)
        except NetworkError as e:
            outcome = RouteFailure("network", e.message)

        latency = time.perf_counter() - start_time
        if isinstance(outcome, RouteFailure):
            logger.warning(
                "Route request failed (%s) for %d waypoints: %s",
                outcome.reason,
                len(waypoints),
                outcome.message,
            )
            record_route_request(outcome.reason, latency)
        else:
            logger.debug(
                "Route computed: %.0fm, %.0fs, %d points",
                outcome.distance_meters,
                outcome.duration_seconds,
                len(outcome.geometry),
            )
            record_route_request("ok", latency)
        return outcome
