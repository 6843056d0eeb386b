"""Aggregate statistics kept in the stats cache.

Reads never fail: a missing or broken cache yields ``"unknown"`` placeholders.
Writes are best-effort increments with no compare-and-swap, so the vector
count is an estimate.
"""

from typing import Any

from unified_mind.core.logging import get_logger
from unified_mind.domain.models.utils import utc_now_iso
from unified_mind.services import StatsCache

logger = get_logger(__name__)

STATS_KEY = "unified-mind:stats"
PLACEHOLDER = "unknown"


class StatsService:
    def __init__(
        self,
        cache: StatsCache | None,
        index_name: str = "unified-mind-index",
        blob_store_name: str = "unified-mind-storage",
        cache_name: str = "unified-mind-cache",
    ):
        self.cache = cache
        self.index_name = index_name
        self.blob_store_name = blob_store_name
        self.cache_name = cache_name

    async def _load(self) -> dict[str, Any]:
        if self.cache is None:
            return {}
        try:
            cached = await self.cache.get(STATS_KEY)
        except Exception as e:
            logger.warning("Stats cache unavailable", extra={"error": str(e)})
            return {}
        return cached if isinstance(cached, dict) else {}

    async def read(self) -> dict[str, Any]:
        """Current counters, with placeholders for anything missing."""
        stats = await self._load()
        return {
            "index": self.index_name,
            "last_updated": stats.get("last_updated") or PLACEHOLDER,
            "vector_count_estimate": stats.get("vector_count") or PLACEHOLDER,
            "storage": {
                "blob_store": self.blob_store_name,
                "cache": self.cache_name,
            },
        }

    async def record_writes(self, count: int) -> None:
        """Bump the approximate vector count after successful writes."""
        if self.cache is None or count <= 0:
            return

        stats = await self._load()
        previous = stats.get("vector_count")
        stats["vector_count"] = (previous if isinstance(previous, int) else 0) + count
        stats["last_updated"] = utc_now_iso()
        try:
            await self.cache.set(STATS_KEY, stats)
        except Exception as e:
            logger.warning("Failed to update stats cache", extra={"error": str(e), "count": count})
