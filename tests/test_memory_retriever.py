"""Tests for semantic search."""

import pytest

from unified_mind.core.errors import InputValidationError
from unified_mind.domain.models import EmbeddingType
from unified_mind.services.memory_retriever import build_filter


class TestBuildFilter:
    def test_empty(self):
        assert build_filter() == {}

    def test_all_disables_every_field(self):
        assert build_filter("all", "all", "all") == {}

    def test_fields(self):
        assert build_filter("ada", "note", "claude") == {
            "entity_name": "ada",
            "memory_type": "note",
            "source_platform": "claude",
        }

    def test_rejects_unknown_type(self):
        with pytest.raises(InputValidationError):
            build_filter(memory_type="diary")


@pytest.fixture
async def populated(writer):
    await writer.store("purple elephants dance at midnight", "ada", "note", source_platform="claude")
    await writer.store("purple elephants dance at midnight", "grace", "journal", source_platform="gpt")
    await writer.store("quarterly tax filing deadline reminder", "ada", "note", source_platform="claude")
    return writer


class TestSearch:
    async def test_exact_match_ranks_first(self, populated, retriever, embeddings):
        result = await retriever.search("purple elephants dance at midnight", min_score=0.99)

        assert result.query == "purple elephants dance at midnight"
        assert result.count == 2
        assert {m.metadata["entity_name"] for m in result.memories} == {"ada", "grace"}
        assert embeddings.calls[-1] == ("purple elephants dance at midnight", EmbeddingType.QUERY)

    async def test_hits_carry_preview_and_attribution(self, populated, retriever):
        result = await retriever.search("quarterly tax filing deadline reminder", entity="ada", min_score=0.99)

        assert result.count == 1
        hit = result.memories[0]
        assert hit.id.startswith("mem_")
        assert hit.text == "quarterly tax filing deadline reminder"
        assert hit.formatted.startswith("[NOTE from ada | Source: claude | ")
        assert hit.formatted.endswith("\nquarterly tax filing deadline reminder\n---")

    async def test_entity_filter(self, populated, retriever):
        result = await retriever.search("purple elephants dance at midnight", entity="grace", min_score=0)
        assert result.count == 1
        assert result.memories[0].metadata["entity_name"] == "grace"

    async def test_type_and_platform_filters(self, populated, retriever):
        by_type = await retriever.search("purple elephants", memory_type="journal", min_score=0)
        assert [m.metadata["entity_name"] for m in by_type.memories] == ["grace"]

        by_platform = await retriever.search("purple elephants", source_platform="claude", min_score=0)
        assert {m.metadata["source_platform"] for m in by_platform.memories} == {"claude"}
        assert by_platform.count == 2

    async def test_all_entity_searches_everything(self, populated, retriever):
        result = await retriever.search("purple elephants", entity="all", min_score=0)
        assert result.count == 3

    async def test_scores_never_below_threshold(self, populated, retriever):
        for threshold in (0.0, 0.3, 0.6, 0.9):
            result = await retriever.search("purple elephants dance", min_score=threshold)
            assert all(m.score >= threshold for m in result.memories)
            scores = [m.score for m in result.memories]
            assert scores == sorted(scores, reverse=True)

    async def test_limit_is_capped(self, writer, retriever):
        for i in range(25):
            await writer.store(f"memory number {i} about gardens", "ada", "note")

        capped = await retriever.search("gardens", limit=100, min_score=0)
        assert capped.count == 20

        small = await retriever.search("gardens", limit=3, min_score=0)
        assert small.count == 3

        floor = await retriever.search("gardens", limit=0, min_score=0)
        assert floor.count == 1

    async def test_blank_query_is_rejected(self, retriever):
        with pytest.raises(InputValidationError):
            await retriever.search("   ")


class TestClamps:
    def test_limit(self, retriever):
        assert retriever.clamp_limit(None) == 10
        assert retriever.clamp_limit(50) == 20
        assert retriever.clamp_limit(-5) == 1

    def test_min_score(self, retriever):
        assert retriever.clamp_min_score(None) == 0.7
        assert retriever.clamp_min_score(1.5) == 1.0
        assert retriever.clamp_min_score(-0.2) == 0.0
