"""Correlation ids tying every log line of one booking session together.

The API uses the session id as the correlation id, so a rider's whole
booking can be pulled out of the logs with a single filter.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

NO_CORRELATION = "-"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def with_correlation(correlation_id: str | None = None) -> Iterator[str]:
    """Run a block under a correlation id, generating one when none is given.

    Yields the id in effect; the previous id is restored on exit.
    """
    correlation_id = correlation_id or new_correlation_id()
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


def get_current_correlation_id() -> str | None:
    return _correlation_id.get()


class CorrelationFilter(logging.Filter):
    """Stamps ``correlation_id`` on every record, ``-`` outside any session."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get() or NO_CORRELATION
        return True
