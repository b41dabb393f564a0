"""Maps engine exceptions to HTTP responses."""

import logging

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse

from core.exceptions import (
    EngineError,
    NotFoundError,
    PaymentDeclinedError,
    StateError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins
_STATUS_CODES: list[tuple[type[EngineError], int]] = [
    (NotFoundError, 404),
    (StateError, 409),
    (PaymentDeclinedError, 402),
    (ValidationError, 422),
    (TransientError, 503),
]


def status_code_for(exc: EngineError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=exc.to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EngineError, engine_error_handler)  # type: ignore[arg-type]
