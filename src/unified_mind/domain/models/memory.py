"""Memory unit domain models.

Stored metadata is kept as a plain mapping rather than a model: callers may
merge arbitrary keys into it, and those keys may shadow system keys.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# System-assigned metadata keys
ENTITY_NAME = "entity_name"
SOURCE_PLATFORM = "source_platform"
MEMORY_TYPE = "memory_type"
TIMESTAMP = "timestamp"
TEXT_PREVIEW = "text_preview"
CHUNK_HASH = "chunk_hash"
CHUNK_INDEX = "chunk_index"
TOTAL_CHUNKS = "total_chunks"
INGESTED_AT = "ingested_at"
BLOB_KEY = "blob_key"


class MemoryType(str, Enum):
    """Closed set of memory classifications."""

    CONVERSATION = "conversation"
    DOCUMENT = "document"
    NOTE = "note"
    REFLECTION = "reflection"
    JOURNAL = "journal"


class VectorRecord(BaseModel):
    """One unit as handed to the vector index."""

    id: str
    values: list[float]
    namespace: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """One nearest-neighbour hit returned by the vector index."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class MemoryHit(BaseModel):
    """A search result with its attribution block."""

    id: str
    score: float
    text: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    formatted: str


class SearchResult(BaseModel):
    query: str
    count: int
    memories: list[MemoryHit] = Field(default_factory=list)


class ChunkFailure(BaseModel):
    """A chunk that could not be written during an ingest call."""

    chunk_index: int
    error: str


class IngestResult(BaseModel):
    success: bool = True
    entity: str
    chunks_created: int
    memory_ids: list[str] = Field(default_factory=list)
    errors: list[ChunkFailure] = Field(default_factory=list)


class StoreResult(BaseModel):
    success: bool = True
    memory_id: str
    entity: str
    type: MemoryType


class GroundingContext(BaseModel):
    context: str
    token_estimate: int
    memories_included: int
    total_available: int
