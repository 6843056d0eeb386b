"""Tool definitions advertised through ``tools/list``."""

import mcp.types as types

from unified_mind.domain.models import MemoryType

MEMORY_TYPES = [t.value for t in MemoryType]

SEARCH = "search"
GET_GROUNDING_CONTEXT = "get_grounding_context"
INGEST = "ingest"
STORE = "store"
STATS = "stats"

STORE_TEXT_MAX_LENGTH = 2000

TOOLS: list[types.Tool] = [
    types.Tool(
        name=SEARCH,
        description="""Search memories semantically. Returns memories with full source attribution.

    Args:
        query: Natural language search query
        entity: Optional - filter by entity namespace
        memory_type: Optional - filter by type (conversation, document, note, reflection, journal)
        source_platform: Optional - filter by platform
        limit: Number of results (default 10, max 20)
        min_score: Minimum similarity threshold (0-1, default 0.7)""",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Semantic search query"},
                "entity": {"type": "string", "description": "Entity namespace to search"},
                "memory_type": {"type": "string", "enum": MEMORY_TYPES},
                "source_platform": {"type": "string", "description": "Source platform filter"},
                "limit": {"type": "integer", "default": 10, "maximum": 20},
                "min_score": {"type": "number", "default": 0.7, "minimum": 0, "maximum": 1},
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name=GET_GROUNDING_CONTEXT,
        description="""Retrieve rich context for session grounding. Returns relevant memories with attribution headers.
    Use this at the START of a conversation to get up to speed.

    Args:
        topic: What you need context about (or "recent" for latest memories)
        entity: Whose memories to search (default: all)
        max_tokens: Approximate token budget (default 2000)""",
        inputSchema={
            "type": "object",
            "properties": {
                "topic": {"type": "string", "description": "Topic or 'recent' for latest"},
                "entity": {"type": "string", "default": "all"},
                "max_tokens": {"type": "integer", "default": 2000, "maximum": 8000},
            },
            "required": ["topic"],
        },
    ),
    types.Tool(
        name=INGEST,
        description="""Ingest content into memory. Handles chunking, embedding, and storage.

    Args:
        content: Text to ingest
        entity_name: Who this belongs to (namespace)
        source_platform: Where this came from
        memory_type: Type classification
        metadata: Additional metadata (speaker, tags, timestamp)""",
        inputSchema={
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "Text to ingest"},
                "entity_name": {"type": "string"},
                "source_platform": {"type": "string"},
                "memory_type": {"type": "string", "enum": MEMORY_TYPES},
                "metadata": {"type": "object"},
            },
            "required": ["content", "entity_name", "source_platform", "memory_type"],
        },
    ),
    types.Tool(
        name=STORE,
        description="""Store a single memory directly (no chunking). For small atomic memories like notes.

    Args:
        text: Memory text (max 2000 chars)
        entity_name: Who this belongs to
        source_platform: Origin
        memory_type: Type
        metadata: Additional metadata""",
        inputSchema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "maxLength": STORE_TEXT_MAX_LENGTH},
                "entity_name": {"type": "string"},
                "source_platform": {"type": "string"},
                "memory_type": {"type": "string", "enum": MEMORY_TYPES},
                "metadata": {"type": "object"},
            },
            "required": ["text", "entity_name", "memory_type"],
        },
    ),
    types.Tool(
        name=STATS,
        description="Get system statistics - storage usage, recent activity.",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def list_tools() -> list[dict]:
    """Tool schemas as plain JSON objects, keyed by their MCP wire names (``inputSchema``)."""
    return [tool.model_dump(by_alias=True, exclude_none=True) for tool in TOOLS]
