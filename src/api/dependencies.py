"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from api.sessions import BookingSession, SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    """Retrieve the session registry from app state."""
    return request.app.state.registry


RegistryDep = Annotated[SessionRegistry, Depends(get_registry)]


def get_session(session_id: str, registry: RegistryDep) -> BookingSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


SessionDep = Annotated[BookingSession, Depends(get_session)]
