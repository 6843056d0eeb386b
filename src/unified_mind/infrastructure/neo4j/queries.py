"""Centralized Cypher for the memory vector index.

All queries touching ``:MemoryUnit`` nodes are built here. Index names are
interpolated (Cypher cannot parameterise them) and are therefore validated
first; everything else travels as a parameter.
"""

import re
from typing import Any, LiteralString, cast

from unified_mind.core.base import ValidationErrorDetails
from unified_mind.core.errors import InputValidationError
from unified_mind.core.logging import get_logger
from unified_mind.infrastructure.neo4j.filter_compiler import compile_filters

logger = get_logger(__name__)

MEMORY_LABEL = "MemoryUnit"
STATS_LABEL = "StatsEntry"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise InputValidationError(
            message=f"Invalid Neo4j identifier: {name!r}",
            details=ValidationErrorDetails(
                source="neo4j_queries",
                operation="check_identifier",
                field="index_name",
                actual_value=name,
                constraint=_IDENTIFIER.pattern,
            ),
        )
    return name


class VectorQueries:
    """Queries for the vector index over memory units."""

    @staticmethod
    def create_vector_index(index_name: str, dimensions: int) -> tuple[LiteralString, dict[str, Any]]:
        index_name = check_identifier(index_name)
        query = f"""
        CREATE VECTOR INDEX {index_name} IF NOT EXISTS
        FOR (m:{MEMORY_LABEL}) ON (m.embedding)
        OPTIONS {{indexConfig: {{
            `vector.dimensions`: {int(dimensions)},
            `vector.similarity_function`: 'cosine'
        }}}}
        """
        return cast(LiteralString, query), {}

    @staticmethod
    def upsert_units() -> tuple[LiteralString, dict[str, Any]]:
        """MERGE every row on id; a repeated id replaces the stored unit."""
        query = f"""
        UNWIND $rows AS row
        MERGE (m:{MEMORY_LABEL} {{id: row.id}})
        SET m.embedding = row.embedding,
            m.namespace = row.namespace,
            m.entity_name = row.entity_name,
            m.memory_type = row.memory_type,
            m.source_platform = row.source_platform,
            m.metadata_json = row.metadata_json
        """
        return cast(LiteralString, query), {}

    @staticmethod
    def similarity_search(
        index_name: str,
        filters: dict[str, Any] | None = None,
    ) -> tuple[LiteralString, dict[str, Any]]:
        """Nearest neighbours, optionally restricted by an equality filter.

        ``$candidates`` is how many neighbours the index returns before the
        filter runs; ``$top_k`` bounds the final result.
        """
        index_name = check_identifier(index_name)
        where, params = compile_filters(filters, alias="node")

        parts = [
            f"CALL db.index.vector.queryNodes('{index_name}', $candidates, $embedding)",
            "YIELD node, score",
        ]
        if where:
            parts.append(f"WHERE {where}")
        parts.append("RETURN node.id AS id, score, node.metadata_json AS metadata_json")
        parts.append("ORDER BY score DESC")
        parts.append("LIMIT $top_k")

        return cast(LiteralString, " ".join(parts)), params


class StatsQueries:
    """Queries for the key/value stats entries."""

    @staticmethod
    def get_entry() -> tuple[LiteralString, dict[str, Any]]:
        query = f"MATCH (s:{STATS_LABEL} {{key: $key}}) RETURN s.value_json AS value_json"
        return cast(LiteralString, query), {}

    @staticmethod
    def set_entry() -> tuple[LiteralString, dict[str, Any]]:
        query = f"""
        MERGE (s:{STATS_LABEL} {{key: $key}})
        SET s.value_json = $value_json,
            s.updated = datetime()
        """
        return cast(LiteralString, query), {}
