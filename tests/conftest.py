"""Shared fakes for the memory services.

Nothing here touches the network, Neo4j or the real filesystem beyond
pytest's ``tmp_path``.
"""

import hashlib
import re

import pytest

from unified_mind.core.config import MemoryConfig
from unified_mind.domain.models import EmbeddingType
from unified_mind.infrastructure.memory import InMemoryBlobStore, InMemoryStatsCache, InMemoryVectorIndex
from unified_mind.mcp.server import MCPServer
from unified_mind.services.grounding import GroundingAssembler
from unified_mind.services.memory_retriever import MemoryRetriever
from unified_mind.services.memory_writer import MemoryWriter
from unified_mind.services.stats import StatsService

DIMENSIONS = 32


class FakeEmbeddingService:
    """Bag-of-words hashing embedder: identical texts get identical vectors."""

    def __init__(self, dimensions: int = DIMENSIONS, fail_on: str | None = None):
        self.dimensions = dimensions
        self.fail_on = fail_on
        self.calls: list[tuple[str, EmbeddingType]] = []

    async def embed_text(self, text: str, embedding_type: EmbeddingType = EmbeddingType.DOCUMENT) -> list[float]:
        self.calls.append((text, embedding_type))
        if self.fail_on and self.fail_on in text:
            raise RuntimeError(f"embedding backend rejected text containing {self.fail_on!r}")
        vector = [0.0] * self.dimensions
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.sha256(word.encode()).hexdigest(), 16) % self.dimensions
            vector[bucket] += 1.0
        vector[0] += 0.001
        return vector

    def get_model_dimensions(self) -> int:
        return self.dimensions


class FailingVectorIndex(InMemoryVectorIndex):
    async def upsert(self, records):
        raise RuntimeError("index unavailable")


class FailingStatsCache:
    async def get(self, key):
        raise RuntimeError("cache down")

    async def set(self, key, value):
        raise RuntimeError("cache down")


class RecordingSink:
    """Stands in for MemoryClient/MemoryWriter in bulk ingestion."""

    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.calls: list[dict] = []

    async def ingest(self, content, entity_name, source_platform, memory_type, metadata=None):
        if self.fail_on and self.fail_on in content:
            raise RuntimeError("sink rejected chunk")
        self.calls.append(
            {
                "content": content,
                "entity_name": entity_name,
                "source_platform": source_platform,
                "memory_type": memory_type,
                "metadata": metadata,
            }
        )
        return {"success": True}


@pytest.fixture
def memory_config():
    return MemoryConfig()


@pytest.fixture
def embeddings():
    return FakeEmbeddingService()


@pytest.fixture
def index():
    return InMemoryVectorIndex()


@pytest.fixture
def blobs():
    return InMemoryBlobStore()


@pytest.fixture
def stats_cache():
    return InMemoryStatsCache()


@pytest.fixture
def stats(stats_cache):
    return StatsService(stats_cache)


@pytest.fixture
def writer(embeddings, index, blobs, memory_config, stats):
    return MemoryWriter(embeddings, index, blobs, memory_config, stats)


@pytest.fixture
def retriever(embeddings, index, memory_config):
    return MemoryRetriever(embeddings, index, memory_config)


@pytest.fixture
def grounding(retriever, memory_config):
    return GroundingAssembler(retriever, memory_config)


@pytest.fixture
def mcp_server(writer, retriever, grounding, stats):
    return MCPServer(writer=writer, retriever=retriever, grounding=grounding, stats=stats)


@pytest.fixture
def sink():
    return RecordingSink()
