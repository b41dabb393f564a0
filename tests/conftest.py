import os

# The routing access token has no default (the engine must refuse to start
# without it). Provide a test value so Settings() can be constructed.
os.environ.setdefault("ROUTING_ACCESS_TOKEN", "test-token")

import pytest

from domain import NamedLocation, Wallet
from mapsync.executor import MapSyncExecutor
from mapsync.surface import RecordingMapSurface
from settings import MapSettings, MatchingSettings, PricingSettings
from tests.factories import DESTINATION, PICKUP, DriverFactory, StubRouteClient, make_location


@pytest.fixture
def driver_factory() -> DriverFactory:
    """Factory for creating drivers with seeded Faker."""
    return DriverFactory(seed=42)


@pytest.fixture
def pickup() -> NamedLocation:
    return make_location(PICKUP, "Pickup")


@pytest.fixture
def destination() -> NamedLocation:
    return make_location(DESTINATION, "Destination")


@pytest.fixture
def route_client() -> StubRouteClient:
    """Stub directions client; unknown origins get a 5km route."""
    return StubRouteClient()


@pytest.fixture
def surface() -> RecordingMapSurface:
    return RecordingMapSurface(zoom=13.0)


@pytest.fixture
def executor(surface: RecordingMapSurface) -> MapSyncExecutor:
    executor = MapSyncExecutor(surface, marker_zoom_ceiling=17.0)
    executor.attach()
    yield executor
    executor.detach()


@pytest.fixture
def wallet() -> Wallet:
    return Wallet(bkcredit=50_000, bkcreditplus=100_000)


@pytest.fixture
def matching_settings() -> MatchingSettings:
    return MatchingSettings()


@pytest.fixture
def map_settings() -> MapSettings:
    return MapSettings()


@pytest.fixture
def pricing_settings() -> PricingSettings:
    return PricingSettings()
