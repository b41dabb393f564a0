"""Booking flow: the rider's path from choosing locations to a confirmed trip.

The flow owns all session state. Each transition updates state, builds map
commands through the reducer and applies them through the executor before
returning, so the map never describes a superseded state.

Direct-route and search requests are awaited without cancellation. Each one
captures the search generation and the endpoints it was started with; when it
completes after the rider changed an endpoint or cleared the session, its
result is discarded.
"""

import logging
from collections.abc import Callable, Sequence

from booking.pricing import PriceBreakdown, can_pay
from booking.state import BookingState, validate_transition
from core.exceptions import NotFoundError, PaymentDeclinedError, StateError
from domain import Booking, BookingRoute, Driver, Match, NamedLocation, PaymentMethod, RouteResult, Wallet
from geo.device_location import LocationProvider, locate_device
from geo.route_client import RouteFailure
from mapsync import reducer
from mapsync.commands import MapCommand, MarkerRole, RouteSlot
from mapsync.executor import MapSyncExecutor
from matching.candidate_filter import find_nearby
from matching.driver_geospatial_index import DriverGeospatialIndex
from matching.match_orchestrator import MatchOrchestrator, RouteFetcher
from metrics import record_booking_confirmed
from settings import MapSettings, MatchingSettings, PricingSettings

logger = logging.getLogger(__name__)

BookingConsumer = Callable[[Booking], None]


class BookingFlow:
    """Session-scoped booking state machine.

    Drivers and wallet are read-only snapshots; confirming a credit payment
    replaces ``wallet`` with a debited copy and never mutates the snapshot
    that was passed in.
    """

    def __init__(
        self,
        route_client: RouteFetcher,
        drivers: Sequence[Driver],
        wallet: Wallet,
        executor: MapSyncExecutor,
        booking_consumer: BookingConsumer | None = None,
        nearby_index: DriverGeospatialIndex | None = None,
        location_provider: LocationProvider | None = None,
        matching_settings: MatchingSettings | None = None,
        map_settings: MapSettings | None = None,
        pricing_settings: PricingSettings | None = None,
    ):
        self._route_client = route_client
        self._drivers = tuple(drivers)
        self._executor = executor
        self._booking_consumer = booking_consumer
        self._nearby_index = nearby_index
        self._location_provider = location_provider
        self._matching = matching_settings or MatchingSettings()
        self._map = map_settings or MapSettings()
        self._pricing = pricing_settings or PricingSettings()
        self._orchestrator = MatchOrchestrator(
            route_client,
            threshold_km=self._matching.candidate_threshold_km,
            max_matches=self._matching.max_matches,
            max_concurrent_requests=self._matching.max_concurrent_requests,
        )

        self.wallet = wallet
        self.state = BookingState.IDLE
        self.generation = 0
        self.device_location: NamedLocation | None = None
        self.pickup: NamedLocation | None = None
        self.destination: NamedLocation | None = None
        self.nearby_drivers: list[Driver] = []
        self.direct_route: RouteResult | None = None
        self.matches: list[Match] = []
        self.selected_index: int | None = None
        self.price_breakdown: PriceBreakdown | None = None
        self.payment_method: PaymentMethod | None = None
        self.booking: Booking | None = None
        self.last_error: str | None = None

    @property
    def selected_match(self) -> Match | None:
        if self.selected_index is None:
            return None
        return self.matches[self.selected_index]

    # --- Locations ---

    async def locate_device(self) -> NamedLocation:
        """Resolve the device position and show the self marker there."""
        location = await locate_device(
            self._location_provider,
            fallback=self._map.default_center,
        )
        self.device_location = location
        self._apply(
            reducer.place_location_marker(MarkerRole.SELF, location)
            + reducer.focus_location(location, self._map.selection_zoom)
        )
        return location

    async def set_pickup(self, location: NamedLocation) -> RouteResult | None:
        """Set the pickup; requests the direct route once both endpoints exist."""
        self._set_endpoint(MarkerRole.PICKUP, location)
        return await self._route_if_ready()

    async def set_destination(self, location: NamedLocation) -> RouteResult | None:
        """Set the destination; requests the direct route once both endpoints exist."""
        self._set_endpoint(MarkerRole.DESTINATION, location)
        return await self._route_if_ready()

    def _set_endpoint(self, role: MarkerRole, location: NamedLocation) -> None:
        pickup = location if role is MarkerRole.PICKUP else self.pickup
        destination = location if role is MarkerRole.DESTINATION else self.destination
        both_set = pickup is not None and destination is not None
        new_state = BookingState.LOCATIONS_SET if both_set else BookingState.LOCATIONS_PARTIAL
        validate_transition(self.state, new_state)

        self.generation += 1
        self.pickup = pickup
        self.destination = destination
        self._discard_downstream()
        self._transition(new_state)

        commands = reducer.place_location_marker(role, location) + reducer.discard_search()
        if role is MarkerRole.PICKUP:
            self.nearby_drivers = self._find_nearby(location)
            commands += reducer.show_driver_markers(MarkerRole.NEARBY_DRIVER, self.nearby_drivers)
            if destination is None:
                commands += reducer.focus_location(location, self._map.pickup_only_zoom)
        self._apply(commands)
        logger.info(f"{role.value.capitalize()} set to {location.name} (generation {self.generation})")

    def _find_nearby(self, point: NamedLocation) -> list[Driver]:
        threshold = self._matching.nearby_threshold_m
        if self._nearby_index is not None:
            return self._nearby_index.find_nearby(point.coordinates, threshold)
        return find_nearby(point.coordinates, self._drivers, threshold)

    async def _route_if_ready(self) -> RouteResult | None:
        if self.state is BookingState.LOCATIONS_SET:
            return await self.compute_route()
        return None

    # --- Direct route ---

    async def compute_route(self) -> RouteResult | None:
        """Request the direct pickup-to-destination route.

        On failure the flow stays in ``locations_set`` with ``last_error``
        set; nothing is raised.
        """
        if self.state is not BookingState.LOCATIONS_SET:
            raise StateError(
                f"Cannot compute a route in state {self.state.value}",
                details={"state": self.state.value},
            )
        generation, pickup, destination = self.generation, self.pickup, self.destination
        self.last_error = None

        outcome = await self._route_client.fetch_route(
            [pickup.coordinates, destination.coordinates]
        )

        if (
            self._is_stale(generation, pickup, destination)
            or self.state is not BookingState.LOCATIONS_SET
        ):
            logger.info(f"Discarding stale direct route (generation {generation} -> {self.generation})")
            return None
        if isinstance(outcome, RouteFailure):
            self.last_error = outcome.message
            logger.warning(f"Direct route unavailable ({outcome.reason}): {outcome.message}")
            return None

        self.direct_route = outcome
        self._transition(BookingState.ROUTE_READY)
        self._apply(
            reducer.show_route(RouteSlot.DIRECT, outcome.geometry)
            + reducer.fit_route(
                outcome.geometry,
                vertical=self._map.fit_padding_vertical,
                horizontal=self._map.fit_padding_horizontal,
            )
        )
        return outcome

    # --- Matching ---

    async def search(self) -> list[Match] | None:
        """Find and rank drivers for the current endpoints.

        Also serves as the manual re-search from ``matched`` or
        ``driver_selected``. Completion always lands in ``matched``, even
        with no matches. Returns None when the result was discarded as stale.
        """
        validate_transition(self.state, BookingState.SEARCHING)
        generation, pickup, destination = self.generation, self.pickup, self.destination

        self.matches = []
        self.selected_index = None
        self.last_error = None
        self._transition(BookingState.SEARCHING)
        self._apply(reducer.discard_search(keep_direct_route=True))

        try:
            matches = await self._orchestrator.match_drivers(
                pickup.coordinates, destination.coordinates, self._drivers
            )
        except Exception:
            if not self._is_stale(generation, pickup, destination):
                self._transition(BookingState.ROUTE_READY)
            raise

        if self._is_stale(generation, pickup, destination):
            logger.info(f"Discarding stale search result (generation {generation} -> {self.generation})")
            return None

        self.matches = matches
        self._transition(BookingState.MATCHED)
        self._apply(
            reducer.show_driver_markers(
                MarkerRole.MATCHED_DRIVER, [match.driver for match in matches]
            )
        )
        return matches

    def select_match(self, index: int) -> Match:
        """Show the combined route of a ranked match and fly to its driver."""
        validate_transition(self.state, BookingState.DRIVER_SELECTED)
        if not 0 <= index < len(self.matches):
            raise NotFoundError(
                f"No match at index {index}",
                details={"index": index, "matches": len(self.matches)},
            )
        match = self.matches[index]
        self.selected_index = index
        # A fare under review belongs to the previous selection
        self.price_breakdown = None
        self.payment_method = None
        self._transition(BookingState.DRIVER_SELECTED)
        self._apply(
            reducer.show_route(RouteSlot.COMBINED, match.combined_route.geometry)
            + reducer.focus_driver(match.driver, self._map.selection_zoom)
        )
        return match

    # --- Pricing and confirmation ---

    def book(self) -> PriceBreakdown:
        """Open pricing review for the selected match."""
        validate_transition(self.state, BookingState.PRICING_REVIEW)
        match = self.selected_match
        self.price_breakdown = PriceBreakdown.for_distance(
            match.total_distance_km,
            base_fare_vnd=self._pricing.base_fare_vnd,
            per_km_vnd=self._pricing.per_km_vnd,
            vnd_per_credit=self._pricing.vnd_per_credit,
        )
        self.payment_method = None
        self._transition(BookingState.PRICING_REVIEW)
        return self.price_breakdown

    def back_to_matches(self) -> None:
        """Leave pricing review; the selected match and its route stay shown."""
        if self.state is not BookingState.PRICING_REVIEW:
            raise StateError(
                f"Not reviewing a price in state {self.state.value}",
                details={"state": self.state.value},
            )
        self.price_breakdown = None
        self.payment_method = None
        self._transition(BookingState.DRIVER_SELECTED)

    def choose_payment_method(self, method: PaymentMethod) -> None:
        if self.state is not BookingState.PRICING_REVIEW:
            raise StateError(
                f"Cannot choose a payment method in state {self.state.value}",
                details={"state": self.state.value},
            )
        self.payment_method = method

    def can_confirm(self) -> bool:
        if self.state is not BookingState.PRICING_REVIEW or self.payment_method is None:
            return False
        return can_pay(
            self.payment_method,
            self.wallet,
            self.price_breakdown.total_vnd,
            vnd_per_credit=self._pricing.vnd_per_credit,
        )

    def confirm(self) -> Booking:
        """Create the booking, debit the wallet and hand the booking to the consumer."""
        validate_transition(self.state, BookingState.CONFIRMED)
        if self.payment_method is None:
            raise PaymentDeclinedError("No payment method chosen")
        if not self.can_confirm():
            raise PaymentDeclinedError(
                f"Insufficient {self.payment_method.value} balance",
                details={
                    "payment_method": self.payment_method.value,
                    "balance": self.wallet.balance_for(self.payment_method),
                    "required": self.price_breakdown.total_credits,
                },
            )

        match = self.selected_match
        booking = Booking(
            driver=match.driver,
            route=BookingRoute(
                distance_meters=match.combined_route.distance_meters,
                duration_seconds=match.combined_route.duration_seconds,
                start=self.pickup,
                end=self.destination,
            ),
            price=self.price_breakdown.total_vnd,
            payment_method=self.payment_method,
        )
        self.wallet = self.wallet.debit(self.payment_method, self.price_breakdown.total_credits)
        self.booking = booking
        self._transition(BookingState.CONFIRMED)
        record_booking_confirmed(self.payment_method.value)
        logger.info(
            f"Booking confirmed with driver {match.driver.id}: "
            f"{booking.price} VND by {booking.payment_method.value}"
        )

        if self._booking_consumer is not None:
            self._booking_consumer(booking)
        return booking

    # --- Teardown ---

    def clear(self) -> None:
        """Discard locations, routes, matches and selection; back to idle."""
        self.generation += 1
        self.pickup = None
        self.destination = None
        self.nearby_drivers = []
        self._discard_downstream()
        self.booking = None
        self.last_error = None
        self._transition(BookingState.IDLE)
        self._apply(reducer.clear_session(self._map.default_center, self._map.default_zoom))

    def reset(self) -> None:
        """Start over after a confirmed booking."""
        if self.state is not BookingState.CONFIRMED:
            raise StateError(
                f"Nothing to reset in state {self.state.value}",
                details={"state": self.state.value},
            )
        self.clear()

    # --- Internals ---

    def _transition(self, new_state: BookingState) -> None:
        if new_state is self.state and new_state is BookingState.IDLE:
            return
        validate_transition(self.state, new_state)
        logger.debug(f"Booking state {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _discard_downstream(self) -> None:
        self.direct_route = None
        self.matches = []
        self.selected_index = None
        self.price_breakdown = None
        self.payment_method = None

    def _is_stale(
        self,
        generation: int,
        pickup: NamedLocation | None,
        destination: NamedLocation | None,
    ) -> bool:
        return (
            generation != self.generation
            or pickup != self.pickup
            or destination != self.destination
        )

    def _apply(self, commands: list[MapCommand]) -> None:
        self._executor.apply(commands)
