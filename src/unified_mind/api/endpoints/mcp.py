"""JSON-RPC endpoint for the MCP protocol."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from unified_mind.api.dependencies import get_mcp_server
from unified_mind.core.logging import clear_log_context, get_logger
from unified_mind.mcp.server import INTERNAL_ERROR, MCPRequest, MCPResponse, MCPServer

logger = get_logger(__name__)

router = APIRouter()


def _internal_error(message: str) -> JSONResponse:
    response = MCPResponse.failure(None, INTERNAL_ERROR, message)
    return JSONResponse(status_code=500, content=response.to_payload())


@router.post("/mcp", operation_id="mcp")
async def handle_mcp(request: Request, server: MCPServer = Depends(get_mcp_server)):
    """Dispatch one JSON-RPC request."""
    try:
        body = await request.json()
        rpc_request = MCPRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.warning("Malformed MCP request", extra={"error": str(e)})
        return _internal_error(f"Malformed request: {e!s}")

    try:
        response = await server.handle_request(rpc_request)
    except Exception as e:
        logger.error("Unhandled MCP failure", extra={"method": rpc_request.method}, exc_info=True)
        return _internal_error(str(e))
    finally:
        clear_log_context()

    return JSONResponse(content=response.to_payload())
