import json
from typing import Any

from neo4j import AsyncDriver

from unified_mind.core.decorators import with_session
from unified_mind.infrastructure.neo4j.queries import StatsQueries


class Neo4jStatsCache:
    """Neo4j-backed key/value cache for aggregate statistics.

    Values are JSON objects stored on ``:StatsEntry`` nodes keyed by name.
    """

    def __init__(self, driver: AsyncDriver):
        self.driver = driver

    @with_session()
    async def get(self, session, key: str) -> dict[str, Any] | None:
        query, _ = StatsQueries.get_entry()
        result = await session.run(query, key=key)
        record = await result.single()
        if not record or not record["value_json"]:
            return None
        value = json.loads(record["value_json"])
        return value if isinstance(value, dict) else None

    @with_session()
    async def set(self, session, key: str, value: dict[str, Any]) -> None:
        query, _ = StatsQueries.set_entry()
        result = await session.run(query, key=key, value_json=json.dumps(value, default=str))
        await result.consume()
