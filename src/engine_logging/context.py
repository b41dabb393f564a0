"""Structured fields attached to every log record emitted inside a block."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

_EMPTY: MappingProxyType[str, Any] = MappingProxyType({})

_fields: ContextVar[MappingProxyType[str, Any]] = ContextVar("log_fields", default=_EMPTY)


def current_log_context() -> dict[str, Any]:
    return dict(_fields.get())


class ContextFilter(logging.Filter):
    """Copies the active fields onto records; explicit ``extra=`` values win."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add fields for the duration of the block, on top of any outer ones."""
    token = _fields.set(MappingProxyType({**_fields.get(), **fields}))
    try:
        yield
    finally:
        _fields.reset(token)


@contextmanager
def log_session_context(session_id: str, **fields: Any) -> Iterator[None]:
    with log_context(session_id=session_id, **fields):
        yield
