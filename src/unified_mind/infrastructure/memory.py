"""In-process collaborators.

Used by the ``memory`` backend for local development and by the tests. Nothing
here survives a restart.
"""

from typing import Any

import numpy as np

from unified_mind.domain.models import VectorMatch, VectorRecord


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


class InMemoryVectorIndex:
    def __init__(self) -> None:
        self.records: dict[str, VectorRecord] = {}

    async def upsert(self, records: list[VectorRecord]) -> None:
        for record in records:
            self.records[record.id] = record

    def _matches_filter(self, record: VectorRecord, filter: dict[str, Any] | None) -> bool:
        if not filter:
            return True
        for key, value in filter.items():
            actual = record.namespace if key == "namespace" else record.metadata.get(key)
            if actual != value:
                return False
        return True

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        query_vec = np.asarray(vector, dtype=float)
        scored = [
            VectorMatch(
                id=record.id,
                score=cosine_similarity(query_vec, np.asarray(record.values, dtype=float)),
                metadata=dict(record.metadata),
            )
            for record in self.records.values()
            if self._matches_filter(record, filter)
        ]
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]


class InMemoryBlobStore:
    def __init__(self) -> None:
        self.blobs: dict[str, str] = {}

    async def put(self, key: str, data: str) -> None:
        self.blobs[key] = data

    async def get(self, key: str) -> str | None:
        return self.blobs.get(key)


class InMemoryStatsCache:
    def __init__(self) -> None:
        self.entries: dict[str, dict[str, Any]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self.entries.get(key)
        return dict(value) if value is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self.entries[key] = dict(value)
