"""Booking session request/response models."""

from typing import Any

from pydantic import BaseModel, Field

from booking.flow import BookingFlow
from booking.pricing import PriceBreakdown
from booking.state import BookingState
from domain import Booking, Coordinate, Driver, NamedLocation, PaymentMethod, RouteResult, Wallet


class CreateSessionRequest(BaseModel):
    """Optional device fix reported by the client when opening a session."""

    device_coordinates: Coordinate | None = None


class PaymentMethodRequest(BaseModel):
    payment_method: PaymentMethod


class ZoomRequest(BaseModel):
    zoom: float = Field(ge=0.0, le=24.0)


class MatchResponse(BaseModel):
    rank: int
    driver: Driver
    combined_route: RouteResult
    total_distance_km: float
    total_duration_min: float


class SessionResponse(BaseModel):
    """Snapshot of a booking session plus the map operations applied since the last call."""

    session_id: str
    state: BookingState
    generation: int
    device_location: NamedLocation | None
    pickup: NamedLocation | None
    destination: NamedLocation | None
    nearby_drivers: list[str]
    direct_route: RouteResult | None
    matches: list[MatchResponse]
    selected_index: int | None
    price: PriceBreakdown | None
    payment_method: PaymentMethod | None
    can_confirm: bool
    wallet: Wallet
    booking: Booking | None
    last_error: str | None
    map_operations: list[dict[str, Any]]

    @classmethod
    def from_flow(
        cls,
        session_id: str,
        flow: BookingFlow,
        map_operations: list[dict[str, Any]],
    ) -> "SessionResponse":
        return cls(
            session_id=session_id,
            state=flow.state,
            generation=flow.generation,
            device_location=flow.device_location,
            pickup=flow.pickup,
            destination=flow.destination,
            nearby_drivers=[driver.id for driver in flow.nearby_drivers],
            direct_route=flow.direct_route,
            matches=[
                MatchResponse(
                    rank=rank,
                    driver=match.driver,
                    combined_route=match.combined_route,
                    total_distance_km=match.total_distance_km,
                    total_duration_min=match.total_duration_min,
                )
                for rank, match in enumerate(flow.matches, start=1)
            ],
            selected_index=flow.selected_index,
            price=flow.price_breakdown,
            payment_method=flow.payment_method,
            can_confirm=flow.can_confirm(),
            wallet=flow.wallet,
            booking=flow.booking,
            last_error=flow.last_error,
            map_operations=map_operations,
        )


class HealthResponse(BaseModel):
    status: str
    active_sessions: int
    drivers_loaded: int
