from unified_mind.domain.models import MemoryType
from unified_mind.services.attribution import estimate_tokens, format_attribution
from unified_mind.services.hashing import content_hash, generate_memory_id


class TestFormatAttribution:
    def test_all_fields(self):
        metadata = {
            "memory_type": "note",
            "entity_name": "ada",
            "source_platform": "claude",
            "timestamp": "2025-01-31T12:00:00.000Z",
        }
        assert format_attribution(metadata, "remember the milk") == (
            "[NOTE from ada | Source: claude | 2025-01-31T12:00:00.000Z]\nremember the milk\n---"
        )

    def test_missing_fields_become_unknown(self):
        assert format_attribution({}, "text") == "[UNKNOWN from unknown | Source: unknown | unknown]\ntext\n---"

    def test_falls_back_to_preview_then_placeholder(self):
        assert "\nfrom preview\n" in format_attribution({"text_preview": "from preview"})
        assert "\n(content unavailable)\n" in format_attribution(None)

    def test_enum_type_renders_by_value(self):
        block = format_attribution({"memory_type": MemoryType.JOURNAL}, "x")
        assert block.startswith("[JOURNAL from")


def test_estimate_tokens_rounds_up():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


class TestHashing:
    def test_hash_is_deterministic_sha256(self):
        assert content_hash("hello") == content_hash("hello")
        assert content_hash("hello") == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        assert content_hash("hello") != content_hash("hello!")

    def test_memory_ids_are_unique(self):
        ids = {generate_memory_id() for _ in range(200)}
        assert len(ids) == 200
        for memory_id in ids:
            assert memory_id.startswith("mem_")
            assert len(memory_id) == 20
            int(memory_id[4:], 16)
