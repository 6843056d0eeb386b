"""Request-scoped logging context.

Values bound here ride along on every structlog event emitted while a
JSON-RPC call is being served.
"""

from typing import Any

import structlog


def bind_request_context(method: str, request_id: Any) -> None:
    """Start a fresh context for one JSON-RPC request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(rpc_method=method, rpc_id=request_id)


def update_log_context(key: str, value: Any) -> None:
    structlog.contextvars.bind_contextvars(**{key: value})


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()
