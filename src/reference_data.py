"""Loads the read-only reference data a booking session works against."""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ConfigurationError
from domain import Driver, Wallet
from settings import WalletSettings

logger = logging.getLogger(__name__)

_DRIVER_LIST = TypeAdapter(list[Driver])


def load_drivers(path: str | Path) -> list[Driver]:
    """Read a JSON array of drivers.

    Raises ConfigurationError when the file is missing or does not hold a
    valid driver list; the engine cannot match anything without one.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Driver snapshot not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Driver snapshot is not valid JSON: {path}") from e

    try:
        drivers = _DRIVER_LIST.validate_python(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Driver snapshot {path} has {e.error_count()} invalid field(s)",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e

    available = sum(1 for driver in drivers if driver.available)
    logger.info(f"Loaded {len(drivers)} drivers ({available} available) from {path}")
    return drivers


def initial_wallet(settings: WalletSettings) -> Wallet:
    return Wallet(bkcredit=settings.bkcredit, bkcreditplus=settings.bkcreditplus)
