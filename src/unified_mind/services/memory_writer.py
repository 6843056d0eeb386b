"""Memory writer: turns content plus provenance into stored memory units.

Metadata merge order: system fields are built first and caller-supplied
metadata is applied on top, so a caller key (including ``chunk_hash``,
``chunk_index`` or ``ingested_at``) replaces the system value. The blob key is
recorded after the merge and cannot be shadowed.
"""

from __future__ import annotations

import json
from typing import Any

from unified_mind.core.base import (
    ErrorLevel,
    IngestErrorDetails,
    ServiceErrorDetails,
    ValidationErrorDetails,
)
from unified_mind.core.config import MemoryConfig
from unified_mind.core.decorators import with_error_handling
from unified_mind.core.errors import EmbeddingError, InputValidationError, ProcessingError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import (
    ChunkFailure,
    EmbeddingType,
    IngestResult,
    MemoryType,
    StoreResult,
    VectorRecord,
)
from unified_mind.domain.models.memory import (
    BLOB_KEY,
    CHUNK_HASH,
    CHUNK_INDEX,
    ENTITY_NAME,
    INGESTED_AT,
    MEMORY_TYPE,
    SOURCE_PLATFORM,
    TEXT_PREVIEW,
    TIMESTAMP,
    TOTAL_CHUNKS,
)
from unified_mind.domain.models.utils import utc_now_iso
from unified_mind.services import BlobStore, EmbeddingService, VectorIndex
from unified_mind.services.chunking import Chunker
from unified_mind.services.hashing import content_hash, generate_memory_id
from unified_mind.services.stats import StatsService

logger = get_logger(__name__)

DEFAULT_STORE_PLATFORM = "direct"


def require_text(value: Any, field: str, operation: str) -> str:
    """Return ``value`` if it is a non-blank string, else raise InputValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(
            message=f"'{field}' is required and must be a non-empty string",
            details=ValidationErrorDetails(
                source="memory_writer",
                operation=operation,
                field=field,
                actual_value=None if value is None else str(value)[:100],
                expected_type="non-empty string",
            ),
        )
    return value


def parse_memory_type(value: Any, operation: str) -> MemoryType:
    """Coerce a string to MemoryType, raising InputValidationError for anything else."""
    if isinstance(value, MemoryType):
        return value
    try:
        return MemoryType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in MemoryType)
        raise InputValidationError(
            message=f"'memory_type' must be one of: {allowed}",
            details=ValidationErrorDetails(
                source="memory_writer",
                operation=operation,
                field="memory_type",
                actual_value=value,
                constraint=allowed,
            ),
        ) from None


class MemoryWriter:
    """Creates memory units; the only component that writes to the index."""

    def __init__(
        self,
        embeddings: EmbeddingService,
        index: VectorIndex,
        blobs: BlobStore,
        config: MemoryConfig | None = None,
        stats: StatsService | None = None,
    ):
        self.embeddings = embeddings
        self.index = index
        self.blobs = blobs
        self.config = config or MemoryConfig()
        self.chunker = Chunker(self.config.fine_chunking)
        self.stats = stats

    def build_metadata(
        self,
        text: str,
        text_hash: str,
        entity_name: str,
        source_platform: str | None,
        memory_type: MemoryType,
        now: str,
        metadata: dict[str, Any],
        chunk_index: int | None = None,
        total_chunks: int | None = None,
    ) -> dict[str, Any]:
        record: dict[str, Any] = {
            ENTITY_NAME: entity_name,
            SOURCE_PLATFORM: source_platform,
            MEMORY_TYPE: memory_type.value,
            TIMESTAMP: metadata.get(TIMESTAMP) or now,
            TEXT_PREVIEW: text[: self.config.preview_length],
            CHUNK_HASH: text_hash,
        }
        if chunk_index is not None:
            record[CHUNK_INDEX] = chunk_index
            record[TOTAL_CHUNKS] = total_chunks
        record[INGESTED_AT] = now
        record.update(metadata)
        return record

    async def _embed(self, text: str) -> list[float]:
        embedding = await self.embeddings.embed_text(text, EmbeddingType.DOCUMENT)
        expected = self.embeddings.get_model_dimensions()
        if len(embedding) != expected:
            raise EmbeddingError(
                message=f"Embedding has {len(embedding)} dimensions, expected {expected}",
                details=ServiceErrorDetails(
                    source="memory_writer",
                    operation="embed",
                    service_name="embedding",
                ),
            )
        return embedding

    async def _write_chunk(
        self,
        chunk: str,
        chunk_index: int,
        total_chunks: int,
        entity_name: str,
        source_platform: str,
        memory_type: MemoryType,
        now: str,
        metadata: dict[str, Any],
    ) -> str:
        text_hash = content_hash(chunk)
        memory_id = generate_memory_id()
        embedding = await self._embed(chunk)

        record = self.build_metadata(
            chunk,
            text_hash,
            entity_name,
            source_platform,
            memory_type,
            now,
            metadata,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
        )

        # The blob must exist before the index points at it
        if len(chunk) > self.config.blob_threshold:
            blob_key = f"chunks/{text_hash}.json"
            await self.blobs.put(
                blob_key,
                json.dumps({"hash": text_hash, "text": chunk, "metadata": record}),
            )
            record[BLOB_KEY] = blob_key

        await self.index.upsert(
            [VectorRecord(id=memory_id, values=embedding, namespace=entity_name, metadata=record)]
        )
        return memory_id

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def ingest(
        self,
        content: str,
        entity_name: str,
        source_platform: str,
        memory_type: MemoryType | str,
        metadata: dict[str, Any] | None = None,
    ) -> IngestResult:
        """Chunk long-form content and store one unit per chunk.

        A failing chunk is recorded in ``errors`` and the remaining chunks are
        still written. Content that fits in one chunk raises when that chunk
        fails; otherwise the result reports ``chunks_created=0``.
        """
        content = require_text(content, "content", "ingest")
        entity_name = require_text(entity_name, "entity_name", "ingest")
        source_platform = require_text(source_platform, "source_platform", "ingest")
        kind = parse_memory_type(memory_type, "ingest")
        metadata = dict(metadata or {})

        chunks = self.chunker.chunk(content)
        now = utc_now_iso()
        memory_ids: list[str] = []
        failures: list[ChunkFailure] = []

        logger.info(
            "Ingesting content",
            extra={"entity": entity_name, "content_length": len(content), "chunks": len(chunks)},
        )

        for i, chunk in enumerate(chunks):
            try:
                memory_id = await self._write_chunk(
                    chunk, i, len(chunks), entity_name, source_platform, kind, now, metadata
                )
            except Exception as e:
                logger.warning(
                    f"Failed to write chunk {i + 1}/{len(chunks)}: {e}",
                    extra={"entity": entity_name, "chunk_index": i},
                )
                failures.append(ChunkFailure(chunk_index=i, error=str(e)))
                continue
            memory_ids.append(memory_id)

        if not memory_ids and len(chunks) <= 1:
            reason = failures[0].error if failures else "no chunks produced"
            raise ProcessingError(
                message=f"Ingest failed: {reason}",
                details=IngestErrorDetails(
                    source="memory_writer",
                    operation="ingest",
                    entity_name=entity_name,
                    total_chunks=len(chunks),
                    failed_chunks=len(failures),
                ),
            )

        if self.stats:
            await self.stats.record_writes(len(memory_ids))

        logger.info(
            f"Ingested {len(memory_ids)}/{len(chunks)} chunks",
            extra={"entity": entity_name, "failed": len(failures)},
        )
        return IngestResult(
            entity=entity_name,
            chunks_created=len(memory_ids),
            memory_ids=memory_ids,
            errors=failures,
        )

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def store(
        self,
        text: str,
        entity_name: str,
        memory_type: MemoryType | str,
        source_platform: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StoreResult:
        """Store short atomic content as exactly one unit, without chunking or blob offload."""
        text = require_text(text, "text", "store")
        entity_name = require_text(entity_name, "entity_name", "store")
        kind = parse_memory_type(memory_type, "store")
        metadata = dict(metadata or {})
        source_platform = source_platform or DEFAULT_STORE_PLATFORM

        memory_id = generate_memory_id()
        now = utc_now_iso()
        text_hash = content_hash(text)
        embedding = await self._embed(text)

        record = self.build_metadata(text, text_hash, entity_name, source_platform, kind, now, metadata)
        await self.index.upsert(
            [VectorRecord(id=memory_id, values=embedding, namespace=entity_name, metadata=record)]
        )

        if self.stats:
            await self.stats.record_writes(1)

        logger.info("Stored memory", extra={"memory_id": memory_id, "entity": entity_name, "type": kind.value})
        return StoreResult(memory_id=memory_id, entity=entity_name, type=kind)
