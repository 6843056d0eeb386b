"""Grounding context assembly for session start."""

from __future__ import annotations

from unified_mind.core.base import ValidationErrorDetails
from unified_mind.core.config import MemoryConfig
from unified_mind.core.errors import InputValidationError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import GroundingContext
from unified_mind.services.attribution import estimate_tokens
from unified_mind.services.memory_retriever import MATCH_ALL, MemoryRetriever
from unified_mind.services.memory_writer import require_text

logger = get_logger(__name__)

# Stand-in query for "recent": there is no timestamp-ordered retrieval
RECENT_TOPIC = "recent"
RECENT_QUERY = "recent conversation important memory significant moment"


class GroundingAssembler:
    """Packs retrieved memories into a token-bounded context block."""

    def __init__(self, retriever: MemoryRetriever, config: MemoryConfig | None = None):
        self.retriever = retriever
        self.config = config or retriever.config

    def clamp_max_tokens(self, max_tokens: int | None) -> int:
        if max_tokens is None:
            return self.config.grounding_default_max_tokens
        return max(1, min(int(max_tokens), self.config.grounding_max_tokens_cap))

    async def get_grounding_context(
        self,
        topic: str,
        entity: str | None = MATCH_ALL,
        max_tokens: int | None = None,
    ) -> GroundingContext:
        topic = require_text(topic, "topic", "get_grounding_context")
        entity = entity or MATCH_ALL
        budget = self.clamp_max_tokens(max_tokens)
        query = RECENT_QUERY if topic.lower() == RECENT_TOPIC else topic

        result = await self.retriever.search(
            query=query,
            entity=entity,
            limit=self.config.grounding_limit,
            min_score=self.config.grounding_min_score,
        )

        context = "## Grounding Context\n"
        context += f'Query: "{topic}" | Entity filter: {entity}\n\n'
        current_tokens = estimate_tokens(context)
        if current_tokens > budget:
            raise InputValidationError(
                message=f"max_tokens={budget} cannot hold the context header ({current_tokens} tokens)",
                details=ValidationErrorDetails(
                    source="grounding",
                    operation="get_grounding_context",
                    field="max_tokens",
                    actual_value=budget,
                    constraint=f">= {current_tokens}",
                ),
            )
        included = 0

        # Greedy in rank order; stop at the first block that does not fit
        for memory in result.memories:
            block = memory.formatted + "\n"
            memory_tokens = estimate_tokens(block)
            if current_tokens + memory_tokens > budget:
                break
            context += block
            current_tokens += memory_tokens
            included += 1

        logger.info(
            "Assembled grounding context",
            extra={"topic": topic, "entity": entity, "included": included, "available": result.count},
        )
        return GroundingContext(
            context=context,
            token_estimate=current_tokens,
            memories_included=included,
            total_available=result.count,
        )
