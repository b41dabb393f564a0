"""Booking flow states and the transition table."""

from enum import Enum

from core.exceptions import StateError


class BookingState(str, Enum):
    """Booking lifecycle states, from location selection to confirmation."""

    IDLE = "idle"
    LOCATIONS_PARTIAL = "locations_partial"
    LOCATIONS_SET = "locations_set"
    ROUTE_READY = "route_ready"
    SEARCHING = "searching"
    MATCHED = "matched"
    DRIVER_SELECTED = "driver_selected"
    PRICING_REVIEW = "pricing_review"
    CONFIRMED = "confirmed"


# Changing an endpoint from any state past locations_set resets to it, and
# clear() returns to idle from anywhere; both are listed explicitly.
VALID_TRANSITIONS: dict[BookingState, set[BookingState]] = {
    BookingState.IDLE: {BookingState.LOCATIONS_PARTIAL},
    BookingState.LOCATIONS_PARTIAL: {
        BookingState.LOCATIONS_PARTIAL,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.LOCATIONS_SET: {
        BookingState.LOCATIONS_SET,
        BookingState.ROUTE_READY,
        BookingState.IDLE,
    },
    BookingState.ROUTE_READY: {
        BookingState.SEARCHING,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.SEARCHING: {
        BookingState.MATCHED,
        BookingState.ROUTE_READY,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.MATCHED: {
        BookingState.DRIVER_SELECTED,
        BookingState.SEARCHING,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.DRIVER_SELECTED: {
        BookingState.DRIVER_SELECTED,
        BookingState.PRICING_REVIEW,
        BookingState.SEARCHING,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.PRICING_REVIEW: {
        BookingState.CONFIRMED,
        BookingState.DRIVER_SELECTED,
        BookingState.LOCATIONS_SET,
        BookingState.IDLE,
    },
    BookingState.CONFIRMED: {BookingState.IDLE},
}


def validate_transition(current: BookingState, new_state: BookingState) -> None:
    """Raise StateError unless ``current -> new_state`` is in the table."""
    if new_state not in VALID_TRANSITIONS[current]:
        raise StateError(
            f"Invalid transition from {current.value} to {new_state.value}",
            details={"from": current.value, "to": new_state.value},
        )
