"""Domain models for Unified Mind."""

from .embedding import EmbeddingType
from .memory import (
    ChunkFailure,
    GroundingContext,
    IngestResult,
    MemoryHit,
    MemoryType,
    SearchResult,
    StoreResult,
    VectorMatch,
    VectorRecord,
)

__all__ = [
    "ChunkFailure",
    # Embedding
    "EmbeddingType",
    "GroundingContext",
    "IngestResult",
    "MemoryHit",
    # Memory
    "MemoryType",
    "SearchResult",
    "StoreResult",
    "VectorMatch",
    "VectorRecord",
]
