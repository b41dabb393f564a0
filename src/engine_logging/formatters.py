"""Log formatters: JSON lines for deployments, one-line text for development."""

import json
import logging
from datetime import UTC, datetime

# Fields set through log_context() or ``extra=`` that both formatters surface
CONTEXT_FIELDS = ("session_id", "driver_id", "generation")


def _context_of(record: logging.LogRecord) -> dict[str, object]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": self.environment,
            "correlation_id": getattr(record, "correlation_id", None),
            **_context_of(record),
        }
        if record.levelno >= logging.WARNING:
            payload["source"] = f"{record.module}:{record.lineno}"
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class DevFormatter(logging.Formatter):
    """``time [LEVEL] [corr=id] logger: message (session=... generation=...)``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] [corr=%(correlation_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += " (" + " ".join(f"{key}={value}" for key, value in context.items()) + ")"
        return line
