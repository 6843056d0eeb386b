"""API dependencies."""

from fastapi import HTTPException

from unified_mind.mcp.server import MCPServer

# Set by the main.py lifespan
mcp_server: MCPServer | None = None


def get_mcp_server() -> MCPServer:
    if mcp_server is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return mcp_server
