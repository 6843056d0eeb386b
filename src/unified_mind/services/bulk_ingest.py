"""Bulk ingestion of transcripts and documents.

Files are classified by extension and, for JSON, by shape. The extracted text
is cut with the coarse chunking profile and every chunk is handed to an
ingest sink: either the remote MCP client or a local MemoryWriter. A failure on
one chunk, message or file is logged and the batch carries on.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field

from unified_mind.core.base import ValidationErrorDetails
from unified_mind.core.config import ChunkingProfile
from unified_mind.core.errors import InputValidationError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import MemoryType
from unified_mind.services.chunking import Chunker

logger = get_logger(__name__)

TEXT_EXTENSIONS = frozenset({".md", ".txt"})
JSON_EXTENSIONS = frozenset({".json"})
DEFAULT_EXTENSIONS = (".md", ".json", ".txt")


class IngestSink(Protocol):
    async def ingest(
        self,
        content: str,
        entity_name: str,
        source_platform: str,
        memory_type: MemoryType | str,
        metadata: dict[str, Any] | None = None,
    ) -> Any: ...


class SourceShape(str, Enum):
    TEXT = "text"
    JSON_ARRAY = "json-array"
    CHAT_EXPORT = "chat-export"
    CONVERSATIONS = "conversations"
    JSON_UNKNOWN = "json-unknown"


class ParsedSource(BaseModel):
    shape: SourceShape
    path: Path
    content: str | None = None
    items: list[Any] = Field(default_factory=list)
    title: str | None = None


class FileReport(BaseModel):
    path: Path
    shape: SourceShape | None = None
    succeeded: int = 0
    failed: int = 0
    error: str | None = None


class DirectoryReport(BaseModel):
    path: Path
    files: list[FileReport] = Field(default_factory=list)

    @property
    def total_succeeded(self) -> int:
        return sum(f.succeeded for f in self.files)

    @property
    def total_failed(self) -> int:
        return sum(f.failed for f in self.files)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def render_message(message: Any) -> str:
    """One transcript line: ``[role]: content``."""
    if not isinstance(message, dict):
        message = {"content": message}
    speaker = message.get("role") or message.get("author") or "unknown"
    body = message.get("content") or message.get("text") or ""
    return f"[{_as_text(speaker)}]: {_as_text(body)}"


def render_conversation(conversation: dict[str, Any]) -> str:
    return "\n\n".join(render_message(m) for m in conversation.get("messages") or [])


def _unsupported(path: Path) -> InputValidationError:
    return InputValidationError(
        message=f"Unsupported file type: {path.suffix or '(none)'}",
        details=ValidationErrorDetails(
            source="bulk_ingest",
            operation="parse_source",
            field="path",
            actual_value=str(path),
            constraint="one of .md, .txt, .json",
        ),
    )


def parse_source(path: Path) -> ParsedSource:
    """Read a file and classify its shape.

    Raises:
        InputValidationError: for an unsupported extension
        OSError, json.JSONDecodeError: when the file cannot be read or parsed
    """
    ext = path.suffix.lower()
    if ext in TEXT_EXTENSIONS:
        return ParsedSource(shape=SourceShape.TEXT, path=path, content=path.read_text(encoding="utf-8"))
    if ext not in JSON_EXTENSIONS:
        raise _unsupported(path)

    data = json.loads(path.read_text(encoding="utf-8"))

    if isinstance(data, list):
        return ParsedSource(shape=SourceShape.JSON_ARRAY, path=path, items=data)
    if isinstance(data, dict) and isinstance(data.get("messages"), list):
        return ParsedSource(
            shape=SourceShape.CHAT_EXPORT, path=path, items=data["messages"], title=data.get("title")
        )
    if isinstance(data, dict) and isinstance(data.get("conversations"), list):
        return ParsedSource(shape=SourceShape.CONVERSATIONS, path=path, items=data["conversations"])

    return ParsedSource(
        shape=SourceShape.JSON_UNKNOWN,
        path=path,
        content=json.dumps(data, indent=2, ensure_ascii=False),
    )


def _compact(metadata: dict[str, Any]) -> dict[str, Any]:
    # Absent values must not shadow server defaults such as timestamp
    return {k: v for k, v in metadata.items() if v is not None}


class BulkIngestionDriver:
    """Feeds files and directories to an ingest sink with fixed provenance."""

    def __init__(
        self,
        sink: IngestSink,
        entity: str,
        platform: str = "file",
        memory_type: MemoryType | str = MemoryType.CONVERSATION,
        profile: ChunkingProfile | None = None,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ):
        self.sink = sink
        self.entity = entity
        self.platform = platform
        self.memory_type = MemoryType(memory_type)
        self.chunker = Chunker(profile or ChunkingProfile(max_chars=1500, overlap_chars=200))
        self.extensions = tuple(e.lower() for e in extensions)

    async def _feed(self, report: FileReport, text: str, metadata: dict[str, Any]) -> None:
        """Chunk ``text`` and send each chunk; failures are counted, not raised."""
        if not text.strip():
            return
        for chunk in self.chunker.chunk(text):
            try:
                await self.sink.ingest(
                    content=chunk,
                    entity_name=self.entity,
                    source_platform=self.platform,
                    memory_type=self.memory_type,
                    metadata=_compact(metadata),
                )
            except Exception as e:
                report.failed += 1
                logger.error(f"Error ingesting chunk from {report.path}: {e}")
                continue
            report.succeeded += 1

    async def _ingest_text(self, report: FileReport, parsed: ParsedSource) -> None:
        content = parsed.content or ""
        chunks = self.chunker.chunk(content) if content.strip() else []
        logger.info(f"Processing document: {parsed.path}", extra={"chunks": len(chunks)})

        for i, chunk in enumerate(chunks):
            try:
                await self.sink.ingest(
                    content=chunk,
                    entity_name=self.entity,
                    source_platform=self.platform,
                    memory_type=self.memory_type,
                    metadata={"source_file": str(parsed.path), "chunk_index": i, "total_chunks": len(chunks)},
                )
            except Exception as e:
                report.failed += 1
                logger.error(f"Error on chunk {i} of {parsed.path}: {e}")
                continue
            report.succeeded += 1

    async def ingest_file(self, path: Path | str) -> FileReport:
        """Ingest one file.

        Raises:
            InputValidationError: for an unsupported extension
        """
        path = Path(path)
        if path.suffix.lower() not in TEXT_EXTENSIONS | JSON_EXTENSIONS:
            raise _unsupported(path)

        report = FileReport(path=path)
        try:
            parsed = parse_source(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            report.error = str(e)
            logger.error(f"Failed to read {path}: {e}")
            return report

        report.shape = parsed.shape
        source_file = str(path)

        if parsed.shape in (SourceShape.TEXT, SourceShape.JSON_UNKNOWN):
            await self._ingest_text(report, parsed)

        elif parsed.shape is SourceShape.CHAT_EXPORT:
            logger.info(f"Processing chat export: {path}", extra={"messages": len(parsed.items)})
            for message in parsed.items:
                fields = message if isinstance(message, dict) else {}
                await self._feed(
                    report,
                    render_message(message),
                    {
                        "source_file": source_file,
                        "message_id": fields.get("id"),
                        "timestamp": fields.get("timestamp") or fields.get("created_at"),
                    },
                )

        elif parsed.shape is SourceShape.CONVERSATIONS:
            logger.info(f"Processing conversations: {path}", extra={"conversations": len(parsed.items)})
            for conversation in parsed.items:
                if not isinstance(conversation, dict):
                    report.failed += 1
                    logger.error(f"Skipping malformed conversation in {path}")
                    continue
                await self._feed(
                    report,
                    render_conversation(conversation),
                    {
                        "source_file": source_file,
                        "conversation_id": conversation.get("id"),
                        "conversation_title": conversation.get("title"),
                    },
                )

        elif parsed.shape is SourceShape.JSON_ARRAY:
            logger.info(f"Processing JSON array: {path}", extra={"entries": len(parsed.items)})
            for i, entry in enumerate(parsed.items):
                text = entry if isinstance(entry, str) else json.dumps(entry, indent=2, ensure_ascii=False)
                await self._feed(report, text, {"source_file": source_file, "entry_index": i})

        logger.info(
            f"Ingested {report.succeeded} chunks from {path}",
            extra={"failed": report.failed, "shape": parsed.shape.value},
        )
        return report

    def discover(self, directory: Path | str) -> list[Path]:
        """Files under ``directory`` (recursively) with an allowed extension, sorted."""
        directory = Path(directory)
        return sorted(
            p for p in directory.rglob("*") if p.is_file() and p.suffix.lower() in self.extensions
        )

    async def ingest_directory(self, directory: Path | str) -> DirectoryReport:
        directory = Path(directory)
        files = self.discover(directory)
        logger.info(
            f"Processing directory: {directory}",
            extra={"files": len(files), "entity": self.entity, "platform": self.platform},
        )

        report = DirectoryReport(path=directory)
        for path in files:
            try:
                report.files.append(await self.ingest_file(path))
            except InputValidationError as e:
                # Allowed extension list may include types without a parser
                logger.warning(str(e), extra={"path": str(path)})
                report.files.append(FileReport(path=path, error=e.message))

        logger.info(f"Total chunks ingested: {report.total_succeeded}", extra={"failed": report.total_failed})
        return report
