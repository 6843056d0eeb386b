"""Tests for file and directory ingestion."""

import json

import pytest

from conftest import RecordingSink
from unified_mind.core.config import ChunkingProfile
from unified_mind.core.errors import InputValidationError
from unified_mind.domain.models import MemoryType
from unified_mind.services.bulk_ingest import (
    BulkIngestionDriver,
    SourceShape,
    parse_source,
    render_conversation,
    render_message,
)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def driver(sink):
    return BulkIngestionDriver(sink, entity="ada", platform="claude")


class TestRendering:
    def test_role_then_author_then_unknown(self):
        assert render_message({"role": "user", "content": "hi"}) == "[user]: hi"
        assert render_message({"author": "ada", "text": "hello"}) == "[ada]: hello"
        assert render_message({"content": "orphan"}) == "[unknown]: orphan"

    def test_conversation_lines_are_blank_line_separated(self):
        conversation = {"messages": [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]}
        assert render_conversation(conversation) == "[user]: a\n\n[assistant]: b"


class TestParseSource:
    def test_shapes(self, tmp_path):
        assert parse_source(write_json(tmp_path / "a.json", [1, 2])).shape is SourceShape.JSON_ARRAY
        assert parse_source(write_json(tmp_path / "b.json", {"messages": []})).shape is SourceShape.CHAT_EXPORT
        assert (
            parse_source(write_json(tmp_path / "c.json", {"conversations": []})).shape
            is SourceShape.CONVERSATIONS
        )
        assert parse_source(write_json(tmp_path / "d.json", {"other": 1})).shape is SourceShape.JSON_UNKNOWN

        text = tmp_path / "e.txt"
        text.write_text("plain", encoding="utf-8")
        assert parse_source(text).shape is SourceShape.TEXT

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "sheet.csv"
        path.write_text("a,b", encoding="utf-8")
        with pytest.raises(InputValidationError):
            parse_source(path)


class TestIngestFile:
    async def test_markdown_document(self, driver, sink, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# Notes\n\nWe sailed at dawn.", encoding="utf-8")

        report = await driver.ingest_file(path)

        assert report.succeeded == 1
        assert report.failed == 0
        call = sink.calls[0]
        assert call["content"] == "# Notes\n\nWe sailed at dawn."
        assert call["entity_name"] == "ada"
        assert call["source_platform"] == "claude"
        assert call["memory_type"] is MemoryType.CONVERSATION
        assert call["metadata"] == {"source_file": str(path), "chunk_index": 0, "total_chunks": 1}

    async def test_long_document_uses_coarse_profile(self, sink, tmp_path):
        driver = BulkIngestionDriver(sink, entity="ada", profile=ChunkingProfile(max_chars=1500, overlap_chars=200))
        path = tmp_path / "long.txt"
        path.write_text("x" * 2100 + "\n\n" + "y" * 1100, encoding="utf-8")

        report = await driver.ingest_file(path)

        assert report.succeeded == len(sink.calls) >= 3
        assert [c["metadata"]["chunk_index"] for c in sink.calls] == list(range(len(sink.calls)))
        assert {c["metadata"]["total_chunks"] for c in sink.calls} == {len(sink.calls)}
        assert {c["source_platform"] for c in sink.calls} == {"file"}

    async def test_chat_export_feeds_each_message(self, driver, sink, tmp_path):
        path = write_json(
            tmp_path / "chat.json",
            {
                "title": "Evening",
                "messages": [
                    {"id": "m1", "role": "user", "content": "hello", "timestamp": "2025-01-01T00:00:00Z"},
                    {"id": "m2", "author": "assistant", "text": "hi there", "created_at": "2025-01-01T00:00:05Z"},
                    {"content": "no id"},
                ],
            },
        )

        report = await driver.ingest_file(path)

        assert report.shape is SourceShape.CHAT_EXPORT
        assert report.succeeded == 3
        assert [c["content"] for c in sink.calls] == ["[user]: hello", "[assistant]: hi there", "[unknown]: no id"]
        assert sink.calls[0]["metadata"] == {
            "source_file": str(path),
            "message_id": "m1",
            "timestamp": "2025-01-01T00:00:00Z",
        }
        assert sink.calls[1]["metadata"]["timestamp"] == "2025-01-01T00:00:05Z"
        assert sink.calls[2]["metadata"] == {"source_file": str(path)}

    async def test_conversations_feed_whole_blocks(self, driver, sink, tmp_path):
        path = write_json(
            tmp_path / "export.json",
            {
                "conversations": [
                    {
                        "id": "c1",
                        "title": "Boats",
                        "messages": [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}],
                    },
                    {"id": "c2", "messages": [{"role": "user", "content": "c"}]},
                ]
            },
        )

        report = await driver.ingest_file(path)

        assert report.succeeded == 2
        assert sink.calls[0]["content"] == "[user]: a\n\n[assistant]: b"
        assert sink.calls[0]["metadata"] == {
            "source_file": str(path),
            "conversation_id": "c1",
            "conversation_title": "Boats",
        }
        assert sink.calls[1]["metadata"] == {"source_file": str(path), "conversation_id": "c2"}

    async def test_json_array_entries(self, driver, sink, tmp_path):
        path = write_json(tmp_path / "list.json", [{"note": "one"}, "two"])

        report = await driver.ingest_file(path)

        assert report.succeeded == 2
        assert sink.calls[0]["content"] == json.dumps({"note": "one"}, indent=2)
        assert sink.calls[1]["content"] == "two"
        assert sink.calls[1]["metadata"]["entry_index"] == 1

    async def test_unknown_json_is_one_document(self, driver, sink, tmp_path):
        path = write_json(tmp_path / "misc.json", {"settings": {"theme": "dark"}})
        report = await driver.ingest_file(path)
        assert report.succeeded == 1
        assert sink.calls[0]["content"] == json.dumps({"settings": {"theme": "dark"}}, indent=2)

    async def test_invalid_json_is_reported(self, driver, sink, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{oops", encoding="utf-8")

        report = await driver.ingest_file(path)

        assert report.succeeded == 0
        assert report.error
        assert sink.calls == []

    async def test_unsupported_extension_raises(self, driver, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")
        with pytest.raises(InputValidationError):
            await driver.ingest_file(path)


class TestIngestDirectory:
    async def test_totals_sum_per_file_successes(self, tmp_path):
        sink = RecordingSink(fail_on="EXPLODE")
        driver = BulkIngestionDriver(sink, entity="ada")
        (tmp_path / "notes.md").write_text("A quiet morning.", encoding="utf-8")
        write_json(
            tmp_path / "chat.json",
            {
                "messages": [
                    {"role": "user", "content": "first"},
                    {"role": "user", "content": "EXPLODE"},
                    {"role": "assistant", "content": "third"},
                ]
            },
        )

        report = await driver.ingest_directory(tmp_path)

        assert report.total_succeeded == sum(f.succeeded for f in report.files) == 3
        assert report.total_failed == 1
        by_name = {f.path.name: f for f in report.files}
        assert by_name["notes.md"].succeeded == 1
        assert by_name["chat.json"].succeeded == 2
        assert by_name["chat.json"].failed == 1

    async def test_walks_recursively_sorted_and_filters(self, driver, sink, tmp_path):
        nested = tmp_path / "b" / "deeper"
        nested.mkdir(parents=True)
        (nested / "z.txt").write_text("zed", encoding="utf-8")
        (tmp_path / "a.md").write_text("ay", encoding="utf-8")
        (tmp_path / "skip.csv").write_text("x,y", encoding="utf-8")
        (tmp_path / "broken.json").write_text("[", encoding="utf-8")

        assert [p.name for p in driver.discover(tmp_path)] == ["a.md", "z.txt", "broken.json"]

        report = await driver.ingest_directory(tmp_path)

        assert report.total_succeeded == 2
        assert [c["content"] for c in sink.calls] == ["ay", "zed"]
        assert next(f for f in report.files if f.path.name == "broken.json").error

    async def test_custom_extensions(self, sink, tmp_path):
        driver = BulkIngestionDriver(sink, entity="ada", extensions=(".TXT",))
        (tmp_path / "a.md").write_text("ay", encoding="utf-8")
        (tmp_path / "b.txt").write_text("bee", encoding="utf-8")

        report = await driver.ingest_directory(tmp_path)

        assert [f.path.name for f in report.files] == ["b.txt"]
