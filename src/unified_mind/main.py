"""Unified Mind FastAPI application.

Serves the MCP JSON-RPC endpoint plus health checks. Collaborators are built
in the lifespan from ``Settings``: Neo4j and the local blob directory, or the
in-process stores when ``VECTOR_BACKEND=memory``.
"""

import os
from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack, asynccontextmanager

import logfire
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from unified_mind.api import dependencies
from unified_mind.api.endpoints import core, mcp
from unified_mind.core.config import Settings, settings
from unified_mind.core.handlers import GlobalErrorHandler
from unified_mind.core.logging import get_logger, setup_logging
from unified_mind.infrastructure.blob.local import LocalBlobStore
from unified_mind.infrastructure.embeddings.voyage import VoyageEmbeddingService
from unified_mind.infrastructure.memory import InMemoryBlobStore, InMemoryStatsCache, InMemoryVectorIndex
from unified_mind.infrastructure.neo4j.driver import create_neo4j_driver
from unified_mind.infrastructure.neo4j.stats_cache import Neo4jStatsCache
from unified_mind.infrastructure.neo4j.vector_index import Neo4jVectorIndex
from unified_mind.mcp.server import MCPServer
from unified_mind.services import EmbeddingService
from unified_mind.services.grounding import GroundingAssembler
from unified_mind.services.memory_retriever import MemoryRetriever
from unified_mind.services.memory_writer import MemoryWriter
from unified_mind.services.stats import StatsService

logfire.configure(
    service_name=settings.service_name,
    token=os.getenv("LOGFIRE_TOKEN"),
    send_to_logfire="if-token-present",
)
setup_logging()
logger = get_logger(__name__)


def build_mcp_server(
    config: Settings,
    embeddings: EmbeddingService,
    index,
    blobs,
    stats_cache,
) -> MCPServer:
    """Wire the memory services around the given collaborators."""
    memory_config = config.memory_config
    stats = StatsService(stats_cache)
    retriever = MemoryRetriever(embeddings, index, memory_config)
    return MCPServer(
        writer=MemoryWriter(embeddings, index, blobs, memory_config, stats),
        retriever=retriever,
        grounding=GroundingAssembler(retriever, memory_config),
        stats=stats,
        name=config.service_name,
        version=config.service_version,
    )


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        logger.info("Starting Unified Mind", extra={"backend": config.vector_backend})

        async with AsyncExitStack() as stack:
            embeddings = VoyageEmbeddingService(config=config)
            dims = embeddings.get_model_dimensions()
            logger.info(f"Using embedding model '{embeddings.model}' with {dims} dimensions")

            if config.vector_backend == "neo4j":
                driver_gen = create_neo4j_driver(config)
                driver = await anext(driver_gen)
                stack.push_async_callback(driver_gen.aclose)

                index = Neo4jVectorIndex(driver, config.vector_index_name, dims)
                await index.ensure_index()
                blobs = LocalBlobStore(config.blob_dir)
                stats_cache = Neo4jStatsCache(driver)
            else:
                logger.warning("In-memory backend selected; nothing will persist across restarts")
                index = InMemoryVectorIndex()
                blobs = InMemoryBlobStore()
                stats_cache = InMemoryStatsCache()

            dependencies.mcp_server = build_mcp_server(config, embeddings, index, blobs, stats_cache)
            logger.info("Unified Mind ready")

            try:
                yield
            finally:
                dependencies.mcp_server = None
                logger.info("Shutting down Unified Mind")

    app = FastAPI(
        title="Unified Mind",
        description="Multi-entity vector memory with source attribution",
        version=config.service_version,
        lifespan=lifespan,
    )

    logfire.instrument_fastapi(app)

    cors_headers = {
        "Access-Control-Allow-Origin": config.cors_origin,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.cors_origin],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next) -> Response:
        """Access-Control headers on every response, with or without an Origin."""
        response = await call_next(request)
        for name, value in cors_headers.items():
            response.headers.setdefault(name, value)
        return response

    error_handler = GlobalErrorHandler()
    app.add_exception_handler(StarletteHTTPException, error_handler.handle_http_exception)

    app.include_router(core.router, tags=["core"])
    app.include_router(mcp.router, tags=["mcp"])
    return app


app = create_app()


def run() -> None:
    """Development server entry point."""
    uvicorn.run(
        "unified_mind.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
