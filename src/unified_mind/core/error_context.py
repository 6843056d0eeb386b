"""Trace ids and flattened context for failures that get logged or returned."""

import logging
from datetime import UTC, datetime
from types import TracebackType
from typing import Any
from uuid import uuid4

from .base import ApplicationError

logger = logging.getLogger(__name__)


class ErrorContext:
    """One failure, stamped with a trace id."""

    def __init__(self, error: Exception, trace_id: str | None = None, **context: Any):
        self.error = error
        self.trace_id = trace_id or uuid4().hex
        self.timestamp = datetime.now(UTC)
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Flatten into log-friendly keys; details and context are namespaced."""
        flat: dict[str, Any] = {
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            "trace_id": self.trace_id,
            "timestamp": self.timestamp.isoformat(),
        }

        if isinstance(self.error, ApplicationError):
            flat["error_code"] = self.error.code.value
            flat["error_level"] = self.error.level.value
            flat.update(
                {f"details.{k}": v for k, v in self.error.details.model_dump(mode="json").items()}
            )

        flat.update({f"context.{k}": v for k, v in self.context.items()})
        return flat


class ErrorContextManager:
    """Wraps the handling of a caught error.

    Used as ``async with ErrorContextManager(e) as ctx`` around the logging of
    ``e``; a second exception raised inside the block is logged before it
    propagates, re-raising ``e`` itself is not.
    """

    def __init__(self, error: Exception | None = None, **context: Any) -> None:
        self._error = error
        self._context = context

    def _enter(self) -> ErrorContext:
        if self._error is None:
            raise ValueError("No error provided for context")
        return ErrorContext(self._error, **self._context)

    def _exit(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        if exc_type is not None and exc_val is not None and exc_val is not self._error:
            logger.error(
                f"{exc_type.__name__} raised while handling {type(self._error).__name__}: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )

    async def __aenter__(self) -> ErrorContext:
        return self._enter()

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        self._exit(exc_type, exc_val, exc_tb)

    def __enter__(self) -> ErrorContext:
        return self._enter()

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        self._exit(exc_type, exc_val, exc_tb)

    async def capture_context(self, error: Exception, **context: Any) -> ErrorContext:
        """Build a context for ``error`` outside a ``with`` block, e.g. in an exception handler."""
        return ErrorContext(error, **context)
