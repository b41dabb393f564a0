import pytest

from mapsync import reducer
from mapsync.commands import (
    AddMarker,
    AddRouteLayer,
    ClearMarkers,
    FitBounds,
    FlyTo,
    MarkerRole,
    RemoveMarker,
    RemoveRouteLayer,
    RouteSlot,
)
from tests.factories import DriverFactory, make_location

GEOMETRY = [(105.80, 21.00), (105.83, 20.99), (105.82, 21.01)]


@pytest.mark.unit
class TestLocationMarkers:
    def test_replacing_location_removes_old_marker_first(self):
        location = make_location((105.8, 21.0), "Hoan Kiem")

        commands = reducer.place_location_marker(MarkerRole.PICKUP, location)

        assert commands == [
            RemoveMarker(marker_id="pickup"),
            AddMarker(
                role=MarkerRole.PICKUP,
                marker_id="pickup",
                coordinates=(105.8, 21.0),
                label="Hoan Kiem",
            ),
        ]

    def test_each_rider_role_has_its_own_marker(self):
        location = make_location((105.8, 21.0))

        ids = {
            reducer.place_location_marker(role, location)[1].marker_id
            for role in (MarkerRole.SELF, MarkerRole.PICKUP, MarkerRole.DESTINATION)
        }

        assert len(ids) == 3


@pytest.mark.unit
class TestDriverMarkers:
    def test_matched_drivers_numbered_by_rank(self, driver_factory: DriverFactory):
        drivers = [driver_factory.driver() for _ in range(3)]

        commands = reducer.show_driver_markers(MarkerRole.MATCHED_DRIVER, drivers)

        assert commands[0] == ClearMarkers(role=MarkerRole.MATCHED_DRIVER)
        assert [command.label for command in commands[1:]] == ["1", "2", "3"]

    def test_nearby_drivers_unlabeled(self, driver_factory: DriverFactory):
        drivers = [driver_factory.driver(), driver_factory.driver()]

        commands = reducer.show_driver_markers(MarkerRole.NEARBY_DRIVER, drivers)

        assert all(command.label is None for command in commands[1:])
        assert commands[1].marker_id == f"nearby_driver:{drivers[0].id}"

    def test_empty_list_only_clears(self):
        assert reducer.show_driver_markers(MarkerRole.NEARBY_DRIVER, []) == [
            ClearMarkers(role=MarkerRole.NEARBY_DRIVER)
        ]


@pytest.mark.unit
class TestRoutes:
    def test_show_route_removes_slot_first(self):
        commands = reducer.show_route(RouteSlot.COMBINED, GEOMETRY)

        assert commands == [
            RemoveRouteLayer(slot=RouteSlot.COMBINED),
            AddRouteLayer(slot=RouteSlot.COMBINED, geometry=tuple(GEOMETRY)),
        ]

    def test_fit_route_uses_bounding_box_and_padding(self):
        (command,) = reducer.fit_route(GEOMETRY, vertical=200, horizontal=50)

        assert isinstance(command, FitBounds)
        assert command.bounds == (105.80, 20.99, 105.83, 21.01)
        assert (command.padding.top, command.padding.bottom) == (200, 200)
        assert (command.padding.left, command.padding.right) == (50, 50)

    def test_fit_empty_route_does_nothing(self):
        assert reducer.fit_route([], vertical=200, horizontal=50) == []

    def test_discard_search_can_keep_direct_route(self):
        commands = reducer.discard_search(keep_direct_route=True)

        assert RemoveRouteLayer(slot=RouteSlot.DIRECT) not in commands
        assert RemoveRouteLayer(slot=RouteSlot.COMBINED) in commands
        assert ClearMarkers(role=MarkerRole.MATCHED_DRIVER) in commands


@pytest.mark.unit
def test_focus_driver_flies_to_current_location(driver_factory: DriverFactory):
    driver = driver_factory.driver(current=(105.811, 21.004))

    assert reducer.focus_driver(driver, zoom=15) == [FlyTo(center=(105.811, 21.004), zoom=15)]


@pytest.mark.unit
def test_clear_session():
    commands = reducer.clear_session((105.8342, 21.0285), 13)

    assert RemoveMarker(marker_id="pickup") in commands
    assert RemoveMarker(marker_id="destination") in commands
    assert ClearMarkers(role=MarkerRole.MATCHED_DRIVER) in commands
    assert RemoveRouteLayer(slot=RouteSlot.DIRECT) in commands
    assert RemoveRouteLayer(slot=RouteSlot.COMBINED) in commands
    assert commands[-1] == FlyTo(center=(105.8342, 21.0285), zoom=13)
    # The device marker stays
    assert RemoveMarker(marker_id="self") not in commands
