"""Logging configuration for the matching engine."""

from .context import log_context, log_session_context
from .setup import setup_logging

__all__ = ["log_context", "log_session_context", "setup_logging"]
