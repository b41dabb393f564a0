"""In-memory registry of booking sessions.

Sessions live only as long as the process; nothing is persisted. A session
nobody has touched for ``session_idle_timeout_seconds`` is closed the next
time the registry is used, and at most ``max_sessions`` are open at once.
"""

import logging
import time
import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from booking.flow import BookingConsumer, BookingFlow
from core.correlation import with_correlation
from core.exceptions import ServiceUnavailableError
from domain import Coordinate, Driver, Wallet
from engine_logging.context import log_session_context
from geo.device_location import LocationProvider
from mapsync.executor import MapSyncExecutor
from mapsync.surface import RecordingMapSurface
from matching.driver_geospatial_index import DriverGeospatialIndex
from matching.match_orchestrator import RouteFetcher
from settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class BookingSession:
    session_id: str
    flow: BookingFlow
    surface: RecordingMapSurface
    executor: MapSyncExecutor
    last_seen: float = field(default=0.0)

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Correlate and tag every log line emitted while serving this session."""
        with with_correlation(self.session_id), log_session_context(self.session_id):
            yield

    def close(self) -> None:
        # Clearing bumps the search generation, so requests still in flight
        # are discarded instead of drawing on the released map.
        with self.scope():
            self.flow.clear()
        self.executor.release_all()
        self.executor.detach()


def fixed_location_provider(coordinates: Coordinate | None) -> LocationProvider:
    """Provider answering with the position the client reported, if any."""

    async def provide() -> Coordinate | None:
        return coordinates

    return provide


class SessionRegistry:
    """Creates and tracks booking sessions over one driver snapshot."""

    def __init__(
        self,
        route_client: RouteFetcher,
        drivers: Sequence[Driver],
        wallet: Wallet,
        settings: Settings,
        booking_consumer: BookingConsumer | None = None,
        clock: Clock = time.monotonic,
    ):
        self._route_client = route_client
        self._drivers = tuple(drivers)
        self._wallet = wallet
        self._settings = settings
        self._booking_consumer = booking_consumer
        self._clock = clock
        self._idle_timeout = settings.engine.session_idle_timeout_seconds
        self._max_sessions = settings.engine.max_sessions
        self._nearby_index = DriverGeospatialIndex(
            self._drivers, h3_resolution=settings.matching.h3_resolution
        )
        self._sessions: dict[str, BookingSession] = {}

    @property
    def driver_count(self) -> int:
        return len(self._drivers)

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, device_coordinates: Coordinate | None = None) -> BookingSession:
        """Open a session.

        Raises:
            ServiceUnavailableError: ``max_sessions`` are open and none is idle.
        """
        self.sweep_idle()
        if len(self._sessions) >= self._max_sessions:
            raise ServiceUnavailableError(
                "Too many open booking sessions",
                details={"max_sessions": self._max_sessions},
            )

        session_id = str(uuid.uuid4())
        surface = RecordingMapSurface(zoom=self._settings.map.default_zoom)
        executor = MapSyncExecutor(surface, self._settings.map.marker_zoom_ceiling)
        executor.attach()
        flow = BookingFlow(
            self._route_client,
            self._drivers,
            self._wallet,
            executor,
            booking_consumer=self._booking_consumer,
            nearby_index=self._nearby_index,
            location_provider=fixed_location_provider(device_coordinates),
            matching_settings=self._settings.matching,
            map_settings=self._settings.map,
            pricing_settings=self._settings.pricing,
        )
        session = BookingSession(session_id, flow, surface, executor, last_seen=self._clock())
        self._sessions[session_id] = session
        logger.info(f"Created booking session {session_id} ({len(self._sessions)} open)")
        return session

    def get(self, session_id: str) -> BookingSession | None:
        """Look up a session and mark it as used; idle sessions are gone."""
        self.sweep_idle()
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = self._clock()
        return session

    def sweep_idle(self) -> int:
        """Close every session idle for longer than the timeout; returns how many."""
        cutoff = self._clock() - self._idle_timeout
        expired = [sid for sid, session in self._sessions.items() if session.last_seen < cutoff]
        for session_id in expired:
            self.close(session_id)
        if expired:
            logger.info(f"Closed {len(expired)} idle booking session(s)")
        return len(expired)

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Closed booking session {session_id}")
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)
