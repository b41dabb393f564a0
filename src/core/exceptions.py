"""Exception hierarchy for the matching engine.

Transient errors come from the directions service and may succeed when the
rider tries again; the engine itself never retries. Permanent errors are
caused by the request or the session state.
"""

from typing import Any


class EngineError(Exception):
    """Base exception for all engine errors."""

    retryable = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Error body for API responses; ``details`` keys are merged in."""
        return {
            "detail": self.message,
            "error": type(self).__name__,
            "retryable": self.retryable,
            **self.details,
        }


class TransientError(EngineError):
    retryable = True


class NetworkError(TransientError):
    """Timeout or connection failure talking to an external service."""


class ServiceUnavailableError(TransientError):
    """External service answered with a 5xx or an unusable body."""


class PermanentError(EngineError):
    pass


class ValidationError(PermanentError):
    """Input the engine cannot work with, including routes that do not exist."""


class NotFoundError(PermanentError):
    pass


class StateError(PermanentError):
    """Operation not allowed in the booking's current state."""


class ConfigurationError(PermanentError):
    """Missing credential or invalid setting; reported once at startup."""


class PaymentDeclinedError(PermanentError):
    """No payment method chosen, or its balance cannot cover the fare."""


class FatalError(EngineError):
    pass
