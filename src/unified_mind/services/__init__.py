"""Service layer interfaces for the external collaborators.

The core never talks to Voyage, Neo4j or the filesystem directly; it receives
objects satisfying these protocols, which keeps it testable with fakes.
"""

from typing import Any, Protocol, runtime_checkable

from unified_mind.domain.models import EmbeddingType, VectorMatch, VectorRecord


@runtime_checkable
class EmbeddingService(Protocol):
    """Protocol for embedding services."""

    async def embed_text(
        self, text: str, embedding_type: EmbeddingType = EmbeddingType.DOCUMENT
    ) -> list[float]:
        """Generate embedding for a single text."""
        ...

    def get_model_dimensions(self) -> int:
        """Get the dimensions of the embedding model."""
        ...


@runtime_checkable
class VectorIndex(Protocol):
    """Protocol for the vector index."""

    async def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or replace records by id."""
        ...

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        """Return up to ``top_k`` matches ordered by descending similarity."""
        ...


@runtime_checkable
class BlobStore(Protocol):
    """Protocol for the blob store holding oversized chunks."""

    async def put(self, key: str, data: str) -> None: ...

    async def get(self, key: str) -> str | None: ...


@runtime_checkable
class StatsCache(Protocol):
    """Protocol for the aggregate statistics cache."""

    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, value: dict[str, Any]) -> None: ...


__all__ = ["BlobStore", "EmbeddingService", "StatsCache", "VectorIndex"]
