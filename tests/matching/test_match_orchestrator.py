import asyncio

import pytest

from domain import Match
from matching.match_orchestrator import MatchOrchestrator, combined_waypoints, rank_matches
from tests.factories import DESTINATION, PICKUP, DriverFactory, StubRouteClient, make_route, no_route


def nearby_positions(count: int) -> list[tuple[float, float]]:
    """Distinct driver positions all within the candidate threshold of the pickup."""
    return [(PICKUP[0] + 0.0001 * i, PICKUP[1] + 0.0001 * i) for i in range(count)]


@pytest.mark.unit
def test_combined_waypoints_order(driver_factory: DriverFactory):
    driver = driver_factory.driver(current=(105.801, 21.001))

    assert combined_waypoints(driver, PICKUP, DESTINATION) == [
        (105.801, 21.001),
        PICKUP,
        DESTINATION,
    ]


@pytest.mark.unit
def test_rank_matches_is_stable(driver_factory: DriverFactory):
    first = Match.from_route(driver_factory.driver(), make_route(3000.0))
    second = Match.from_route(driver_factory.driver(), make_route(3000.0))
    shorter = Match.from_route(driver_factory.driver(), make_route(1000.0))

    assert rank_matches([first, second, shorter]) == [shorter, first, second]


@pytest.mark.critical
async def test_shorter_combined_route_ranks_first(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    longer = driver_factory.driver(current=(105.801, 21.001))
    shorter = driver_factory.driver(current=(105.802, 21.002))
    route_client.set_outcome(longer.current_location.coordinates, make_route(4200.0, 900.0))
    route_client.set_outcome(shorter.current_location.coordinates, make_route(3100.0, 660.0))

    matches = await MatchOrchestrator(route_client).match_drivers(
        PICKUP, DESTINATION, [longer, shorter]
    )

    assert [match.driver for match in matches] == [shorter, longer]
    assert matches[0].total_distance_km == pytest.approx(3.1)
    assert matches[0].total_duration_min == pytest.approx(11.0)
    assert matches[1].total_distance_km == pytest.approx(4.2)


async def test_requests_combined_route_per_candidate(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    drivers = [driver_factory.driver(current=position) for position in nearby_positions(3)]
    far = driver_factory.driver(current=(105.900, 21.100))

    await MatchOrchestrator(route_client).match_drivers(PICKUP, DESTINATION, drivers + [far])

    assert len(route_client.calls) == 3
    assert all(call[1:] == [PICKUP, DESTINATION] for call in route_client.calls)


async def test_at_most_five_matches_non_decreasing(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    distances = [5200.0, 3100.0, 4700.0, 2900.0, 6100.0, 3300.0, 4100.0, 2500.0]
    drivers = []
    for position, distance in zip(nearby_positions(len(distances)), distances, strict=True):
        drivers.append(driver_factory.driver(current=position))
        route_client.set_outcome(position, make_route(distance))

    matches = await MatchOrchestrator(route_client).match_drivers(PICKUP, DESTINATION, drivers)

    assert len(matches) == 5
    totals = [match.total_distance_km for match in matches]
    assert totals == sorted(totals)
    assert totals == pytest.approx([2.5, 2.9, 3.1, 3.3, 4.1])


async def test_failed_routes_are_dropped(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    positions = nearby_positions(3)
    drivers = [driver_factory.driver(current=position) for position in positions]
    route_client.set_outcome(positions[0], no_route())
    route_client.set_outcome(positions[1], RuntimeError("connection reset"))
    route_client.set_outcome(positions[2], make_route(3500.0))

    matches = await MatchOrchestrator(route_client).match_drivers(PICKUP, DESTINATION, drivers)

    assert [match.driver for match in matches] == [drivers[2]]


async def test_all_routes_failing_returns_empty(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    route_client.default = no_route()
    drivers = [driver_factory.driver(current=position) for position in nearby_positions(4)]

    assert await MatchOrchestrator(route_client).match_drivers(PICKUP, DESTINATION, drivers) == []


async def test_no_candidates_makes_no_requests(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    drivers = [driver_factory.driver(available=False)]

    assert await MatchOrchestrator(route_client).match_drivers(PICKUP, DESTINATION, drivers) == []
    assert route_client.calls == []


async def test_concurrent_requests_are_bounded(
    driver_factory: DriverFactory, route_client: StubRouteClient
):
    drivers = [driver_factory.driver(current=position) for position in nearby_positions(10)]
    gate = route_client.hold()
    orchestrator = MatchOrchestrator(route_client, max_concurrent_requests=3)

    task = asyncio.create_task(orchestrator.match_drivers(PICKUP, DESTINATION, drivers))
    for _ in range(5):
        await asyncio.sleep(0)
    assert route_client.in_flight == 3

    gate.set()
    matches = await task

    assert route_client.max_in_flight == 3
    assert len(route_client.calls) == 10
    assert len(matches) == 5
