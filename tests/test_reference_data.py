import json
from pathlib import Path

import pytest

from core.exceptions import ConfigurationError
from reference_data import initial_wallet, load_drivers
from settings import WalletSettings
from tests.factories import DriverFactory

SAMPLE_DRIVERS = Path(__file__).parent.parent / "data" / "drivers.json"


@pytest.mark.unit
class TestLoadDrivers:
    def test_sample_snapshot_loads(self):
        drivers = load_drivers(SAMPLE_DRIVERS)

        assert len(drivers) == 4
        assert drivers[0].current_location.coordinates == (105.8342, 21.0285)
        assert not drivers[3].available

    def test_round_trip_from_models(self, tmp_path: Path, driver_factory: DriverFactory):
        driver = driver_factory.driver()
        path = tmp_path / "drivers.json"
        path.write_text(json.dumps([driver.model_dump(mode="json")]))

        assert load_drivers(path) == [driver]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_drivers(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "drivers.json"
        path.write_text("[{")

        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_drivers(path)

    def test_invalid_driver(self, tmp_path: Path):
        path = tmp_path / "drivers.json"
        path.write_text(json.dumps([{"id": "driver-001", "rating": 2.0}]))

        with pytest.raises(ConfigurationError) as exc_info:
            load_drivers(path)

        assert exc_info.value.details["errors"]


@pytest.mark.unit
def test_initial_wallet():
    wallet = initial_wallet(WalletSettings())

    assert (wallet.bkcredit, wallet.bkcreditplus) == (50_000, 100_000)
