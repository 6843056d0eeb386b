"""structlog loggers routed through the stdlib handler, mirrored to Logfire."""

from .context import bind_request_context, clear_log_context, update_log_context
from .setup import get_logger, setup_logging

__all__ = [
    "bind_request_context",
    "clear_log_context",
    "get_logger",
    "setup_logging",
    "update_log_context",
]
