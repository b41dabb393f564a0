import httpx
import pytest
import respx
from httpx import Response

from core.exceptions import ValidationError
from domain import RouteResult
from geo.route_client import (
    InvalidRouteResponseError,
    NoRouteFoundError,
    RouteClient,
    RouteFailure,
    RouteRejectedError,
    RouteServiceError,
    RouteTimeoutError,
    format_waypoints,
)

BASE_URL = "https://directions.test"
ROUTE_PATTERN = r".*/directions/v5/mapbox/driving/.*"
WAYPOINTS = [(105.800, 21.000), (105.820, 21.010)]


@pytest.fixture
def route_client() -> RouteClient:
    return RouteClient(base_url=BASE_URL, access_token="pk.test", timeout=2.0)


@pytest.fixture
def valid_directions_response() -> dict:
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": 3120.4,
                "duration": 512.7,
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[105.800, 21.000], [105.810, 21.004], [105.820, 21.010]],
                },
            },
            {
                "distance": 4000.0,
                "duration": 700.0,
                "geometry": {"type": "LineString", "coordinates": [[105.8, 21.0], [105.82, 21.01]]},
            },
        ],
        "waypoints": [],
    }


def test_format_waypoints_keeps_order():
    assert (
        format_waypoints([(105.8, 21.0), (105.81, 21.005), (105.82, 21.01)])
        == "105.8,21.0;105.81,21.005;105.82,21.01"
    )


async def test_route_request_valid(route_client: RouteClient, valid_directions_response: dict):
    async with respx.mock:
        route = respx.get(url__regex=ROUTE_PATTERN).mock(
            return_value=Response(200, json=valid_directions_response)
        )

        result = await route_client.get_route(WAYPOINTS)

        assert route.called
        assert isinstance(result, RouteResult)
        assert result.distance_meters == 3120.4
        assert result.duration_seconds == 512.7
        assert result.geometry[0] == (105.800, 21.000)
        assert len(result.geometry) == 3


async def test_request_url_and_params(route_client: RouteClient, valid_directions_response: dict):
    async with respx.mock:
        route = respx.get(url__regex=ROUTE_PATTERN).mock(
            return_value=Response(200, json=valid_directions_response)
        )

        await route_client.get_route(WAYPOINTS)

        request = route.calls.last.request
        assert request.url.path == "/directions/v5/mapbox/driving/105.8,21.0;105.82,21.01"
        assert request.url.params["geometries"] == "geojson"
        assert request.url.params["overview"] == "full"
        assert request.url.params["access_token"] == "pk.test"


async def test_fewer_than_two_waypoints_rejected(route_client: RouteClient):
    with pytest.raises(ValidationError):
        await route_client.get_route([(105.8, 21.0)])


async def test_no_route_code(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(
            return_value=Response(200, json={"code": "NoRoute", "routes": []})
        )

        with pytest.raises(NoRouteFoundError):
            await route_client.get_route(WAYPOINTS)


async def test_ok_without_routes(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(
            return_value=Response(200, json={"code": "Ok", "routes": []})
        )

        with pytest.raises(NoRouteFoundError):
            await route_client.get_route(WAYPOINTS)


async def test_rejected_request(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(
            return_value=Response(401, json={"message": "Not Authorized - Invalid Token"})
        )

        with pytest.raises(RouteRejectedError, match="Invalid Token"):
            await route_client.get_route(WAYPOINTS)


async def test_server_error(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(return_value=Response(503))

        with pytest.raises(RouteServiceError):
            await route_client.get_route(WAYPOINTS)


async def test_non_json_body(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(return_value=Response(200, text="<html>"))

        with pytest.raises(InvalidRouteResponseError):
            await route_client.get_route(WAYPOINTS)


async def test_timeout(route_client: RouteClient):
    async with respx.mock:
        respx.get(url__regex=ROUTE_PATTERN).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(RouteTimeoutError):
            await route_client.get_route(WAYPOINTS)


class TestFetchRoute:
    async def test_success_returns_route(
        self, route_client: RouteClient, valid_directions_response: dict
    ):
        async with respx.mock:
            respx.get(url__regex=ROUTE_PATTERN).mock(
                return_value=Response(200, json=valid_directions_response)
            )

            outcome = await route_client.fetch_route(WAYPOINTS)

            assert isinstance(outcome, RouteResult)
            assert outcome.distance_meters == 3120.4

    @pytest.mark.parametrize(
        ("response", "reason"),
        [
            (Response(200, json={"code": "NoRoute"}), "no_route"),
            (Response(422, json={"code": "InvalidInput", "message": "bad"}), "rejected"),
            (Response(500), "service_unavailable"),
            (Response(200, text="not json"), "invalid_response"),
            (Response(200, json={"code": "Ok", "routes": [{"distance": 1}]}), "invalid_response"),
        ],
    )
    async def test_failures_are_tagged_not_raised(
        self, route_client: RouteClient, response: Response, reason: str
    ):
        async with respx.mock:
            respx.get(url__regex=ROUTE_PATTERN).mock(return_value=response)

            outcome = await route_client.fetch_route(WAYPOINTS)

            assert isinstance(outcome, RouteFailure)
            assert outcome.reason == reason

    async def test_rejected_failure_carries_code(self, route_client: RouteClient):
        async with respx.mock:
            respx.get(url__regex=ROUTE_PATTERN).mock(
                return_value=Response(422, json={"code": "InvalidInput", "message": "bad"})
            )

            outcome = await route_client.fetch_route(WAYPOINTS)

            assert outcome.code == "InvalidInput"

    async def test_timeout_is_tagged(self, route_client: RouteClient):
        async with respx.mock:
            respx.get(url__regex=ROUTE_PATTERN).mock(side_effect=httpx.ConnectTimeout("slow"))

            outcome = await route_client.fetch_route(WAYPOINTS)

            assert outcome == RouteFailure("timeout", "Request timed out after 2.0s")

    async def test_network_error_is_tagged(self, route_client: RouteClient):
        async with respx.mock:
            respx.get(url__regex=ROUTE_PATTERN).mock(side_effect=httpx.ConnectError("refused"))

            outcome = await route_client.fetch_route(WAYPOINTS)

            assert isinstance(outcome, RouteFailure)
            assert outcome.reason == "network"
