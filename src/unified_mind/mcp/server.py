"""MCP JSON-RPC server over the memory services."""

import json
from typing import Any

import mcp.types as types
from pydantic import BaseModel

from unified_mind.core.base import ErrorCode, ValidationErrorDetails
from unified_mind.core.errors import InputValidationError
from unified_mind.core.logging import bind_request_context, get_logger, update_log_context
from unified_mind.mcp import tools
from unified_mind.services.grounding import GroundingAssembler
from unified_mind.services.memory_retriever import MATCH_ALL, MemoryRetriever
from unified_mind.services.memory_writer import MemoryWriter
from unified_mind.services.stats import StatsService

logger = get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_DESCRIPTION = "Multi-entity vector memory with source attribution"

# JSON-RPC error codes
TOOL_EXECUTION_ERROR = -32000
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603


class MCPRequest(BaseModel):
    """MCP protocol request."""

    jsonrpc: str = "2.0"
    id: str | int | None = None
    method: str
    params: dict[str, Any] | None = None


class MCPResponse(BaseModel):
    """MCP protocol response."""

    jsonrpc: str = "2.0"
    id: str | int | None = None
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire form: ``id`` is always present, and exactly one of result/error."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error
        else:
            payload["result"] = self.result if self.result is not None else {}
        return payload

    @classmethod
    def failure(cls, request_id: str | int | None, code: int, message: str) -> "MCPResponse":
        return cls(id=request_id, error={"code": code, "message": message})


def _optional_int(args: dict[str, Any], key: str) -> int | None:
    value = args.get(key)
    return None if value is None else int(value)


def _optional_float(args: dict[str, Any], key: str) -> float | None:
    value = args.get(key)
    return None if value is None else float(value)


class MCPServer:
    """Dispatches ``initialize``, ``tools/list`` and ``tools/call``."""

    def __init__(
        self,
        writer: MemoryWriter,
        retriever: MemoryRetriever,
        grounding: GroundingAssembler,
        stats: StatsService,
        name: str = "unified-mind",
        version: str = "1.0.0",
    ):
        self.writer = writer
        self.retriever = retriever
        self.grounding = grounding
        self.stats = stats
        self.name = name
        self.version = version
        self.handlers = {
            tools.SEARCH: self._search,
            tools.GET_GROUNDING_CONTEXT: self._get_grounding_context,
            tools.INGEST: self._ingest,
            tools.STORE: self._store,
            tools.STATS: self._stats,
        }

    async def handle_request(self, request: MCPRequest) -> MCPResponse:
        bind_request_context(request.method, request.id)
        logger.info("Handling MCP request")

        if request.method == "initialize":
            return self._handle_initialize(request)
        if request.method == "tools/list":
            return MCPResponse(id=request.id, result={"tools": tools.list_tools()})
        if request.method == "tools/call":
            return await self._handle_tool_call(request)

        logger.warning("Unknown MCP method", extra={"method": request.method})
        return MCPResponse.failure(request.id, METHOD_NOT_FOUND, f"Unknown method: {request.method}")

    def _handle_initialize(self, request: MCPRequest) -> MCPResponse:
        return MCPResponse(
            id=request.id,
            result={
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {
                    "name": self.name,
                    "version": self.version,
                    "description": SERVER_DESCRIPTION,
                },
            },
        )

    async def _handle_tool_call(self, request: MCPRequest) -> MCPResponse:
        params = request.params or {}
        name = params.get("name")
        arguments = params.get("arguments") or {}
        update_log_context("tool", name)

        try:
            if not isinstance(arguments, dict):
                raise InputValidationError(
                    message="Tool arguments must be an object",
                    details=ValidationErrorDetails(
                        source="mcp_server",
                        operation="tools/call",
                        field="arguments",
                        expected_type="object",
                    ),
                )
            result = await self.call_tool(name, arguments)
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}", extra={"tool": name})
            return MCPResponse.failure(request.id, TOOL_EXECUTION_ERROR, str(e))

        content = types.TextContent(type="text", text=json.dumps(result, indent=2, default=str))
        return MCPResponse(id=request.id, result={"content": [content.model_dump(by_alias=True, exclude_none=True)]})

    async def call_tool(self, name: Any, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run one tool and return its JSON-serialisable result."""
        handler = self.handlers.get(name) if isinstance(name, str) else None
        if handler is None:
            raise InputValidationError(
                message=f"Unknown tool: {name}",
                details=ValidationErrorDetails(
                    source="mcp_server",
                    operation="tools/call",
                    field="name",
                    actual_value=name,
                    constraint=", ".join(self.handlers),
                ),
                code=ErrorCode.TOOL_NOT_FOUND,
            )
        return await handler(arguments)

    async def _search(self, args: dict[str, Any]) -> dict[str, Any]:
        result = await self.retriever.search(
            query=args.get("query"),
            entity=args.get("entity"),
            memory_type=args.get("memory_type"),
            source_platform=args.get("source_platform"),
            limit=_optional_int(args, "limit"),
            min_score=_optional_float(args, "min_score"),
        )
        return result.model_dump()

    async def _get_grounding_context(self, args: dict[str, Any]) -> dict[str, Any]:
        result = await self.grounding.get_grounding_context(
            topic=args.get("topic"),
            entity=args.get("entity") or MATCH_ALL,
            max_tokens=_optional_int(args, "max_tokens"),
        )
        return result.model_dump()

    async def _ingest(self, args: dict[str, Any]) -> dict[str, Any]:
        result = await self.writer.ingest(
            content=args.get("content"),
            entity_name=args.get("entity_name"),
            source_platform=args.get("source_platform"),
            memory_type=args.get("memory_type"),
            metadata=args.get("metadata"),
        )
        return result.model_dump(mode="json")

    async def _store(self, args: dict[str, Any]) -> dict[str, Any]:
        text = args.get("text")
        if isinstance(text, str) and len(text) > tools.STORE_TEXT_MAX_LENGTH:
            logger.warning(
                "Store text exceeds advertised maximum",
                extra={"length": len(text), "max_length": tools.STORE_TEXT_MAX_LENGTH},
            )
        result = await self.writer.store(
            text=text,
            entity_name=args.get("entity_name"),
            memory_type=args.get("memory_type"),
            source_platform=args.get("source_platform"),
            metadata=args.get("metadata"),
        )
        return result.model_dump(mode="json")

    async def _stats(self, args: dict[str, Any]) -> dict[str, Any]:
        return await self.stats.read()
