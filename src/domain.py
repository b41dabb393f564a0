"""Domain models shared by the matching engine components.

Coordinates are (longitude, latitude) pairs in WGS84 degrees, the order used
by the directions service and the map surface.
"""

import math
from enum import Enum
from typing import Annotated, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from geo.units import meters_to_km, seconds_to_minutes


def _require_finite(value: tuple[float, float]) -> tuple[float, float]:
    if not all(math.isfinite(component) for component in value):
        raise ValueError(f"Coordinate components must be finite numbers, got {value}")
    return value


Coordinate = Annotated[tuple[float, float], AfterValidator(_require_finite)]


class NamedLocation(BaseModel):
    """A coordinate with a display name, from geocoding or device location."""

    model_config = ConfigDict(frozen=True)

    coordinates: Coordinate
    name: str


class Vehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    make: str
    model: str
    license_plate: str


class Driver(BaseModel):
    """Read-only driver reference data for one matching session."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    current_location: NamedLocation
    destination: NamedLocation
    waypoints: tuple[NamedLocation, ...] = ()
    rating: float = Field(ge=4.0, le=5.0)
    vehicle_type: str
    available: bool
    vehicle: Vehicle


class RouteResult(BaseModel):
    """Drivable path returned by the directions service, in meters and seconds."""

    model_config = ConfigDict(frozen=True)

    geometry: tuple[Coordinate, ...]
    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)


class Match(BaseModel):
    """A candidate driver with a successfully routed combined trip."""

    model_config = ConfigDict(frozen=True)

    driver: Driver
    combined_route: RouteResult
    total_distance_km: float
    total_duration_min: float

    @classmethod
    def from_route(cls, driver: Driver, route: RouteResult) -> Self:
        """Build a match whose totals derive from its own combined route."""
        return cls(
            driver=driver,
            combined_route=route,
            total_distance_km=meters_to_km(route.distance_meters),
            total_duration_min=seconds_to_minutes(route.duration_seconds),
        )


class PaymentMethod(str, Enum):
    CASH = "cash"
    BKCREDIT = "bkcredit"
    BKCREDIT_PLUS = "bkcreditplus"

    @property
    def is_credit(self) -> bool:
        return self is not PaymentMethod.CASH


class Wallet(BaseModel):
    """Snapshot of the rider's credit balances (1 credit = 10 VND by default)."""

    model_config = ConfigDict(frozen=True)

    bkcredit: int = Field(default=0, ge=0)
    bkcreditplus: int = Field(default=0, ge=0)

    def balance_for(self, method: PaymentMethod) -> int | None:
        """Credit balance backing a payment method; None for cash."""
        if method is PaymentMethod.CASH:
            return None
        return int(getattr(self, method.value))

    def debit(self, method: PaymentMethod, credits: int) -> "Wallet":
        """Return a new wallet with ``credits`` taken from the method's balance."""
        balance = self.balance_for(method)
        if balance is None:
            return self
        if credits > balance:
            raise ValueError(f"Cannot debit {credits} credits from {method.value} balance {balance}")
        return self.model_copy(update={method.value: balance - credits})


class BookingRoute(BaseModel):
    model_config = ConfigDict(frozen=True)

    distance_meters: float
    duration_seconds: float
    start: NamedLocation
    end: NamedLocation


class Booking(BaseModel):
    """Confirmed trip handed to the booking consumer."""

    model_config = ConfigDict(frozen=True)

    driver: Driver
    route: BookingRoute
    price: int
    payment_method: PaymentMethod
