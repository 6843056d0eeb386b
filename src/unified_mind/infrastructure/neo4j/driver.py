"""Neo4j driver and connection management.

This module provides an async-first Neo4j driver resource provider with
connection management and query execution.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any, Generic, LiteralString, TypeVar, cast

from neo4j import AsyncDriver, AsyncGraphDatabase

from unified_mind.core.base import ErrorCode, ServiceErrorDetails
from unified_mind.core.config import Settings, settings
from unified_mind.core.errors import ServiceError
from unified_mind.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def create_neo4j_driver(
    config: Settings | None = None,
    max_connection_pool_size: int = 50,
    max_connection_lifetime: int = 3600,
) -> AsyncGenerator[AsyncDriver]:
    """Create a Neo4j driver, yield it, and close it when the generator resumes.

    Yields:
        AsyncDriver: Connected Neo4j driver

    Raises:
        ServiceError: If connection fails
    """
    config = config or settings

    logger.info(
        "Creating Neo4j driver",
        extra={
            "uri": config.neo4j_uri,
            "pool_size": max_connection_pool_size,
            "connection_lifetime": max_connection_lifetime,
        },
    )

    driver = AsyncGraphDatabase.driver(
        config.neo4j_uri,
        auth=(config.neo4j_user, config.neo4j_password),
        max_connection_pool_size=max_connection_pool_size,
        max_connection_lifetime=max_connection_lifetime,
    )

    try:
        await driver.verify_connectivity()
    except Exception as e:
        await driver.close()
        raise ServiceError(
            message=f"Could not connect to Neo4j at {config.neo4j_uri}: {e!s}",
            details=ServiceErrorDetails(
                source="create_neo4j_driver",
                operation="verify_connectivity",
                service_name="Neo4j",
                endpoint=config.neo4j_uri,
            ),
            code=ErrorCode.INDEX_CONNECTION,
        ) from e
    logger.info("Neo4j connection established")

    try:
        yield driver
    finally:
        await driver.close()
        logger.info("Neo4j driver closed")


class Neo4jQuery(Generic[T]):
    """Neo4j query executor with typed results."""

    def __init__(self, driver: AsyncDriver) -> None:
        self.driver: AsyncDriver = driver

    async def execute_list(
        self,
        query: LiteralString,
        params: dict[str, Any] | None = None,
        result_transformer: Callable[[Any], T] | None = None,
    ) -> list[T]:
        """Execute a query and return every record, transformed if a transformer is given."""
        logger.debug("Executing Neo4j query for result list", extra={"query": query})

        results: list[T] = []
        async with self.driver.session() as session:
            result = await session.run(query, parameters=params or {})
            async for record in result:
                results.append(result_transformer(record) if result_transformer else cast("T", record))
        return results

    async def execute_write(
        self,
        query: LiteralString,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Execute a query for its side effects and consume the result."""
        logger.debug("Executing Neo4j write", extra={"query": query})

        async with self.driver.session() as session:
            result = await session.run(query, parameters=params or {})
            await result.consume()
