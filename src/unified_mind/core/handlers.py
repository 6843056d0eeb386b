"""Error handlers for the HTTP layer"""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from unified_mind.core.logging import get_logger

from .base import ApplicationError, ErrorCode, ErrorLevel
from .error_context import ErrorContext, ErrorContextManager

logger = get_logger(__name__)

MCP_HINT = "Use POST /mcp for MCP protocol"


class ErrorHandler:
    """Base class for error handlers"""

    def __init__(self, context_manager: ErrorContextManager | None = None):
        self.context_manager = context_manager or ErrorContextManager()

    def _format_response(
        self,
        error_context: ErrorContext,
        level: ErrorLevel,
        additional_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Format error response"""
        response = {
            "error": str(error_context.error),
            "error_code": (additional_context or {}).get("error_code", ErrorCode.PROCESSING_FAILED.value),
            "level": level.value,
            "trace_id": error_context.trace_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if isinstance(error_context.error, ApplicationError):
            response["error_code"] = error_context.error.code.value
            response["details"] = error_context.error.details.model_dump(mode="json")

        if additional_context and additional_context.get("hint"):
            response["hint"] = additional_context["hint"]

        return response


class GlobalErrorHandler(ErrorHandler):
    """Global error handler for FastAPI application"""

    async def handle_http_exception(self, request: Request, error: HTTPException) -> JSONResponse:
        """Render HTTP exceptions as JSON; unknown paths point callers at the MCP endpoint."""
        level = (
            ErrorLevel.ERROR
            if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else ErrorLevel.WARNING
        )
        error_context = await self.context_manager.capture_context(
            error, status_code=error.status_code, path=request.url.path
        )

        if error.status_code == status.HTTP_404_NOT_FOUND:
            body = self._format_response(
                error_context, level, {"error_code": ErrorCode.NOT_FOUND.value, "hint": MCP_HINT}
            )
            body["error"] = "Not Found"
        else:
            body = self._format_response(
                error_context, level, {"error_code": ErrorCode.INVALID_REQUEST.value}
            )
            body["error"] = str(error.detail)

        logger.log(
            level.to_logging_level(),
            f"HTTP {error.status_code} on {request.method} {request.url.path}",
            extra={"trace_id": error_context.trace_id},
        )
        return JSONResponse(status_code=error.status_code, content=body, headers=getattr(error, "headers", None))
