"""Tests for the collaborator adapters that run without external services."""

from types import SimpleNamespace

import pytest

from conftest import FailingStatsCache
from unified_mind.core.config import Settings
from unified_mind.core.errors import (
    AuthenticationError,
    EmbeddingError,
    InputValidationError,
    ProcessingError,
    StorageError,
)
from unified_mind.domain.models import EmbeddingType, VectorRecord
from unified_mind.infrastructure.blob.local import LocalBlobStore
from unified_mind.infrastructure.embeddings.voyage import VoyageEmbeddingService
from unified_mind.infrastructure.memory import InMemoryVectorIndex
from unified_mind.infrastructure.neo4j.filter_compiler import compile_filters
from unified_mind.infrastructure.neo4j.queries import VectorQueries, check_identifier
from unified_mind.services.stats import StatsService


class TestLocalBlobStore:
    async def test_round_trip(self, tmp_path):
        store = LocalBlobStore(tmp_path)
        await store.put("chunks/abc.json", '{"text": "hello"}')

        assert (tmp_path / "chunks" / "abc.json").read_text(encoding="utf-8") == '{"text": "hello"}'
        assert await store.get("chunks/abc.json") == '{"text": "hello"}'

    async def test_missing_key(self, tmp_path):
        assert await LocalBlobStore(tmp_path).get("chunks/nope.json") is None

    @pytest.mark.parametrize("key", ["../escape.json", "chunks/../../escape.json", ""])
    async def test_rejects_keys_outside_root(self, tmp_path, key):
        store = LocalBlobStore(tmp_path / "blobs")
        with pytest.raises(StorageError):
            await store.put(key, "x")


class TestInMemoryVectorIndex:
    async def test_ranked_and_filtered(self):
        index = InMemoryVectorIndex()
        await index.upsert(
            [
                VectorRecord(id="a", values=[1.0, 0.0], namespace="ada", metadata={"entity_name": "ada"}),
                VectorRecord(id="b", values=[0.6, 0.8], namespace="ada", metadata={"entity_name": "ada"}),
                VectorRecord(id="c", values=[0.0, 1.0], namespace="grace", metadata={"entity_name": "grace"}),
            ]
        )

        matches = await index.query([1.0, 0.0], top_k=10)
        assert [m.id for m in matches] == ["a", "b", "c"]
        assert matches[0].score == pytest.approx(1.0)

        filtered = await index.query([1.0, 0.0], top_k=10, filter={"entity_name": "grace"})
        assert [m.id for m in filtered] == ["c"]

        assert len(await index.query([1.0, 0.0], top_k=1)) == 1

    async def test_upsert_replaces_by_id(self):
        index = InMemoryVectorIndex()
        await index.upsert([VectorRecord(id="a", values=[1.0], namespace="n", metadata={"v": 1})])
        await index.upsert([VectorRecord(id="a", values=[1.0], namespace="n", metadata={"v": 2})])
        matches = await index.query([1.0], top_k=5)
        assert [(m.id, m.metadata["v"]) for m in matches] == [("a", 2)]


class TestNeo4jQueries:
    def test_compile_filters(self):
        where, params = compile_filters({"memory_type": "note", "entity_name": "ada"})
        assert where == "node.entity_name = $f_0 AND node.memory_type = $f_1"
        assert params == {"f_0": "ada", "f_1": "note"}

    def test_empty_filter(self):
        assert compile_filters(None) == ("", {})

    def test_rejects_unknown_property(self):
        with pytest.raises(InputValidationError):
            compile_filters({"metadata_json": "x"})

    def test_similarity_search_with_filter(self):
        query, params = VectorQueries.similarity_search("unified_mind_embeddings", {"entity_name": "ada"})
        assert "db.index.vector.queryNodes('unified_mind_embeddings', $candidates, $embedding)" in query
        assert "WHERE node.entity_name = $f_0" in query
        assert query.endswith("LIMIT $top_k")
        assert params == {"f_0": "ada"}

    def test_similarity_search_without_filter(self):
        query, params = VectorQueries.similarity_search("idx")
        assert "WHERE" not in query
        assert params == {}

    def test_index_names_are_validated(self):
        assert check_identifier("unified_mind_embeddings") == "unified_mind_embeddings"
        with pytest.raises(InputValidationError):
            check_identifier("idx') YIELD node DETACH DELETE node //")

    def test_create_index(self):
        query, _ = VectorQueries.create_vector_index("idx", 1024)
        assert "CREATE VECTOR INDEX idx IF NOT EXISTS" in query
        assert "`vector.dimensions`: 1024" in query
        assert "'cosine'" in query


class FakeVoyageClient:
    def __init__(self, error: Exception | None = None, embeddings=None):
        self.error = error
        self.embeddings = [[0.1, 0.2]] if embeddings is None else embeddings
        self.calls = []

    async def embed(self, texts, model, input_type):
        self.calls.append({"texts": texts, "model": model, "input_type": input_type})
        if self.error:
            raise self.error
        return SimpleNamespace(embeddings=self.embeddings)


class TestVoyageEmbeddingService:
    async def test_passes_input_type(self):
        client = FakeVoyageClient()
        service = VoyageEmbeddingService(model="voyage-3-lite", client=client)

        assert await service.embed_text("hello", EmbeddingType.QUERY) == [0.1, 0.2]
        assert client.calls == [{"texts": ["hello"], "model": "voyage-3-lite", "input_type": "query"}]
        assert service.get_model_dimensions() == 512

    async def test_client_failure_is_wrapped(self):
        service = VoyageEmbeddingService(client=FakeVoyageClient(error=RuntimeError("rate limited")))
        with pytest.raises(EmbeddingError, match="rate limited"):
            await service.embed_text("hello")

    async def test_empty_response(self):
        service = VoyageEmbeddingService(client=FakeVoyageClient(embeddings=[]))
        with pytest.raises(EmbeddingError):
            await service.embed_text("hello")

    async def test_rejects_empty_text(self):
        service = VoyageEmbeddingService(client=FakeVoyageClient())
        with pytest.raises(ProcessingError):
            await service.embed_text("   ")

    def test_missing_key(self):
        with pytest.raises(AuthenticationError):
            VoyageEmbeddingService(config=Settings(voyage_api_key=""))


class TestStatsService:
    async def test_placeholders_without_cache(self):
        stats = await StatsService(None).read()
        assert stats["last_updated"] == "unknown"
        assert stats["vector_count_estimate"] == "unknown"

    async def test_broken_cache_never_raises(self):
        service = StatsService(FailingStatsCache())
        await service.record_writes(3)
        stats = await service.read()
        assert stats["vector_count_estimate"] == "unknown"

    async def test_record_writes_accumulates(self, stats_cache):
        service = StatsService(stats_cache)
        await service.record_writes(2)
        await service.record_writes(3)
        stats = await service.read()
        assert stats["vector_count_estimate"] == 5
        assert stats["last_updated"].endswith("Z")
