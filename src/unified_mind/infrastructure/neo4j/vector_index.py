"""Neo4j-backed vector index for memory units."""

import json
from typing import Any

from neo4j import AsyncDriver
from neo4j.exceptions import Neo4jError

from unified_mind.core.base import ErrorCode, ErrorLevel, ServiceErrorDetails
from unified_mind.core.decorators import with_error_handling
from unified_mind.core.errors import ServiceError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import VectorMatch, VectorRecord
from unified_mind.domain.models.memory import ENTITY_NAME, MEMORY_TYPE, SOURCE_PLATFORM
from unified_mind.infrastructure.neo4j.driver import Neo4jQuery
from unified_mind.infrastructure.neo4j.queries import VectorQueries

logger = get_logger(__name__)

# queryNodes filters after the nearest-neighbour cut, so filtered
# searches ask for more candidates than they return
FILTER_OVERSAMPLE = 10
MAX_CANDIDATES = 1000


def _to_row(record: VectorRecord) -> dict[str, Any]:
    metadata = record.metadata
    return {
        "id": record.id,
        "embedding": record.values,
        "namespace": record.namespace,
        "entity_name": metadata.get(ENTITY_NAME),
        "memory_type": metadata.get(MEMORY_TYPE),
        "source_platform": metadata.get(SOURCE_PLATFORM),
        "metadata_json": json.dumps(metadata, default=str),
    }


def _to_match(record: Any) -> VectorMatch:
    raw = record["metadata_json"]
    metadata = json.loads(raw) if raw else {}
    return VectorMatch(id=record["id"], score=float(record["score"]), metadata=metadata)


class Neo4jVectorIndex:
    """Stores each unit as a ``:MemoryUnit`` node carrying its embedding.

    Provenance fields are copied onto node properties for filtering; the full
    metadata mapping round-trips as JSON.
    """

    def __init__(self, driver: AsyncDriver, index_name: str, dimensions: int):
        self.driver = driver
        self.index_name = index_name
        self.dimensions = dimensions
        self.query_executor: Neo4jQuery[VectorMatch] = Neo4jQuery(driver)

    def _failure(self, operation: str, code: ErrorCode, error: Exception) -> ServiceError:
        return ServiceError(
            message=f"Neo4j {operation} failed: {error!s}",
            details=ServiceErrorDetails(
                source="Neo4jVectorIndex",
                operation=operation,
                service_name="Neo4j",
                endpoint=self.index_name,
            ),
            code=code,
        )

    async def ensure_index(self) -> None:
        """Create the vector index if it does not exist yet."""
        query, params = VectorQueries.create_vector_index(self.index_name, self.dimensions)
        try:
            await self.query_executor.execute_write(query, params)
        except Neo4jError as e:
            raise self._failure("ensure_index", ErrorCode.INDEX_CONNECTION, e) from e
        logger.info("Vector index ready", extra={"index": self.index_name, "dimensions": self.dimensions})

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def upsert(self, records: list[VectorRecord]) -> None:
        if not records:
            return
        query, params = VectorQueries.upsert_units()
        params["rows"] = [_to_row(r) for r in records]
        try:
            await self.query_executor.execute_write(query, params)
        except Neo4jError as e:
            raise self._failure("upsert", ErrorCode.INDEX_UPSERT, e) from e
        logger.debug("Upserted vectors", extra={"count": len(records)})

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        query, params = VectorQueries.similarity_search(self.index_name, filter)
        candidates = top_k if not filter else min(top_k * FILTER_OVERSAMPLE, MAX_CANDIDATES)
        params.update({"embedding": vector, "top_k": top_k, "candidates": max(candidates, top_k)})
        try:
            return await self.query_executor.execute_list(query, params, result_transformer=_to_match)
        except Neo4jError as e:
            raise self._failure("query", ErrorCode.INDEX_QUERY, e) from e
