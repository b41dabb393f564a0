from fastapi import APIRouter, Body, status

from api.dependencies import RegistryDep, SessionDep
from api.models.sessions import (
    CreateSessionRequest,
    PaymentMethodRequest,
    SessionResponse,
    ZoomRequest,
)
from api.sessions import BookingSession
from domain import NamedLocation

router = APIRouter()


def _snapshot(session: BookingSession) -> SessionResponse:
    return SessionResponse.from_flow(
        session.session_id, session.flow, session.surface.drain_operations()
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SessionResponse)
async def create_session(
    registry: RegistryDep,
    body: CreateSessionRequest | None = Body(default=None),
) -> SessionResponse:
    """Open a booking session and place the rider's device marker."""
    device_coordinates = body.device_coordinates if body is not None else None
    session = registry.create(device_coordinates)
    with session.scope():
        await session.flow.locate_device()
    return _snapshot(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session: SessionDep) -> SessionResponse:
    return _snapshot(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session: SessionDep, registry: RegistryDep) -> None:
    registry.close(session.session_id)


@router.put("/{session_id}/pickup", response_model=SessionResponse)
async def set_pickup(session: SessionDep, location: NamedLocation) -> SessionResponse:
    with session.scope():
        await session.flow.set_pickup(location)
    return _snapshot(session)


@router.put("/{session_id}/destination", response_model=SessionResponse)
async def set_destination(session: SessionDep, location: NamedLocation) -> SessionResponse:
    with session.scope():
        await session.flow.set_destination(location)
    return _snapshot(session)


@router.post("/{session_id}/route", response_model=SessionResponse)
async def compute_route(session: SessionDep) -> SessionResponse:
    """Retry the direct route after a failure; ``last_error`` reports a new one."""
    with session.scope():
        await session.flow.compute_route()
    return _snapshot(session)


@router.post("/{session_id}/search", response_model=SessionResponse)
async def search(session: SessionDep) -> SessionResponse:
    with session.scope():
        await session.flow.search()
    return _snapshot(session)


@router.post("/{session_id}/matches/{index}/select", response_model=SessionResponse)
async def select_match(session: SessionDep, index: int) -> SessionResponse:
    with session.scope():
        session.flow.select_match(index)
    return _snapshot(session)


@router.post("/{session_id}/book", response_model=SessionResponse)
async def book(session: SessionDep) -> SessionResponse:
    with session.scope():
        session.flow.book()
    return _snapshot(session)


@router.post("/{session_id}/back", response_model=SessionResponse)
async def back_to_matches(session: SessionDep) -> SessionResponse:
    with session.scope():
        session.flow.back_to_matches()
    return _snapshot(session)


@router.put("/{session_id}/payment-method", response_model=SessionResponse)
async def choose_payment_method(
    session: SessionDep, body: PaymentMethodRequest
) -> SessionResponse:
    with session.scope():
        session.flow.choose_payment_method(body.payment_method)
    return _snapshot(session)


@router.post("/{session_id}/confirm", response_model=SessionResponse)
async def confirm(session: SessionDep) -> SessionResponse:
    with session.scope():
        session.flow.confirm()
    return _snapshot(session)


@router.post("/{session_id}/clear", response_model=SessionResponse)
async def clear(session: SessionDep) -> SessionResponse:
    with session.scope():
        session.flow.clear()
    return _snapshot(session)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset(session: SessionDep) -> SessionResponse:
    with session.scope():
        session.flow.reset()
    return _snapshot(session)


@router.post("/{session_id}/zoom", response_model=SessionResponse)
async def set_zoom(session: SessionDep, body: ZoomRequest) -> SessionResponse:
    """Report the client map's zoom level so driver markers follow the ceiling."""
    session.surface.set_zoom(body.zoom)
    return _snapshot(session)
