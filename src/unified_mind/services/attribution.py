"""Attribution formatting.

Every memory handed back to a caller is wrapped in a provenance header naming
its type, owner, origin platform and time::

    [NOTE from mind-1 | Source: claude | 2025-01-31T12:00:00.000Z]
    the memory text
    ---
"""

import math
from collections.abc import Mapping
from typing import Any

from unified_mind.core.config import CHARS_PER_TOKEN
from unified_mind.domain.models.memory import (
    ENTITY_NAME,
    MEMORY_TYPE,
    SOURCE_PLATFORM,
    TEXT_PREVIEW,
    TIMESTAMP,
)

UNKNOWN = "unknown"
CONTENT_UNAVAILABLE = "(content unavailable)"


def _field(metadata: Mapping[str, Any], key: str) -> str:
    value = metadata.get(key)
    if value is None or value == "":
        return UNKNOWN
    # Enum members render by value
    return str(getattr(value, "value", value))


def format_attribution(metadata: Mapping[str, Any] | None, text: str | None = None) -> str:
    """Render a memory and its metadata as an attributed block.

    Args:
        metadata: Stored metadata of the memory unit
        text: Content to show; falls back to the stored preview

    Returns:
        The three-line attributed block
    """
    metadata = metadata or {}
    memory_type = _field(metadata, MEMORY_TYPE).upper()
    entity = _field(metadata, ENTITY_NAME)
    platform = _field(metadata, SOURCE_PLATFORM)
    timestamp = _field(metadata, TIMESTAMP)
    content = text or metadata.get(TEXT_PREVIEW) or CONTENT_UNAVAILABLE

    return f"[{memory_type} from {entity} | Source: {platform} | {timestamp}]\n{content}\n---"


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)
