"""Semantic search over stored memory units."""

from __future__ import annotations

from typing import Any

from unified_mind.core.base import ErrorLevel
from unified_mind.core.config import MemoryConfig
from unified_mind.core.decorators import with_error_handling
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import EmbeddingType, MemoryHit, SearchResult
from unified_mind.domain.models.memory import (
    ENTITY_NAME,
    MEMORY_TYPE,
    SOURCE_PLATFORM,
    TEXT_PREVIEW,
)
from unified_mind.services import EmbeddingService, VectorIndex
from unified_mind.services.attribution import format_attribution
from unified_mind.services.memory_writer import parse_memory_type, require_text

logger = get_logger(__name__)

MATCH_ALL = "all"


def _is_set(value: str | None) -> bool:
    return bool(value) and value != MATCH_ALL


def build_filter(
    entity: str | None = None,
    memory_type: str | None = None,
    source_platform: str | None = None,
) -> dict[str, Any]:
    """Equality filter over the supplied provenance fields.

    ``None``, empty strings and ``"all"`` leave a field unrestricted; an empty
    result means no filtering.
    """
    filter: dict[str, Any] = {}
    if _is_set(entity):
        filter[ENTITY_NAME] = entity
    if _is_set(memory_type):
        filter[MEMORY_TYPE] = parse_memory_type(memory_type, "search").value
    if _is_set(source_platform):
        filter[SOURCE_PLATFORM] = source_platform
    return filter


class MemoryRetriever:
    def __init__(
        self,
        embeddings: EmbeddingService,
        index: VectorIndex,
        config: MemoryConfig | None = None,
    ):
        self.embeddings = embeddings
        self.index = index
        self.config = config or MemoryConfig()

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            limit = self.config.search_default_limit
        return max(1, min(int(limit), self.config.search_max_limit))

    def clamp_min_score(self, min_score: float | None) -> float:
        if min_score is None:
            return self.config.search_default_min_score
        return max(0.0, min(float(min_score), 1.0))

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def search(
        self,
        query: str,
        entity: str | None = None,
        memory_type: str | None = None,
        source_platform: str | None = None,
        limit: int | None = None,
        min_score: float | None = None,
    ) -> SearchResult:
        """Search memories semantically.

        Args:
            query: Natural language search query
            entity: Optional entity namespace filter ("all" disables it)
            memory_type: Optional memory type filter
            source_platform: Optional platform filter
            limit: Maximum results, capped at the configured maximum (20)
            min_score: Similarity threshold in [0, 1]

        Returns:
            Matches at or above ``min_score`` in the order the index ranked them
        """
        query = require_text(query, "query", "search")
        top_k = self.clamp_limit(limit)
        threshold = self.clamp_min_score(min_score)
        filter = build_filter(entity, memory_type, source_platform)

        vector = await self.embeddings.embed_text(query, EmbeddingType.QUERY)
        matches = await self.index.query(vector, top_k=top_k, filter=filter or None)

        memories = []
        for match in matches[:top_k]:
            if match.score < threshold:
                continue
            preview = match.metadata.get(TEXT_PREVIEW)
            memories.append(
                MemoryHit(
                    id=match.id,
                    score=match.score,
                    text=preview,
                    metadata=match.metadata,
                    formatted=format_attribution(match.metadata, preview),
                )
            )

        logger.info(
            "Search completed",
            extra={"filter": filter, "top_k": top_k, "candidates": len(matches), "result_count": len(memories)},
        )
        return SearchResult(query=query, count=len(memories), memories=memories)
