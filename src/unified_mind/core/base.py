"""Base error classes and enums"""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from logfire.integrations.pydantic import PluginSettings
from pydantic import BaseModel, Field, field_serializer


class ErrorLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        return getattr(logging, self.name)


class ErrorCode(str, Enum):
    """Stable identifiers surfaced in logs and HTTP error bodies."""

    # Request handling (1xxx)
    INVALID_REQUEST = "1001"
    INVALID_INPUT = "1002"
    NOT_FOUND = "1003"
    TOOL_NOT_FOUND = "1004"

    # Memory pipeline (2xxx)
    PROCESSING_FAILED = "2001"

    # Vector index (3xxx)
    INDEX_CONNECTION = "3001"
    INDEX_QUERY = "3002"
    INDEX_UPSERT = "3003"

    # Embedding model (4xxx)
    AUTHENTICATION_FAILED = "4001"
    EMBEDDING_FAILED = "4002"

    # Other collaborators (5xxx)
    SERVICE_UNAVAILABLE = "5001"
    STORAGE_OPERATION = "5002"


class ErrorDetails(BaseModel, plugin_settings=PluginSettings(logfire={"record": "all"})):
    """Structured context attached to every ApplicationError"""

    model_config = {"extra": "allow"}

    source: str = Field(description="Component that raised the error")
    operation: str = Field(description="Operation in progress, e.g. ingest or tools/call")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class ValidationErrorDetails(ErrorDetails):
    field: str | None = Field(None, description="Argument that was rejected")
    actual_value: Any = Field(None, description="Value received, truncated where long")
    expected_type: str | None = None
    constraint: str | None = Field(None, description="Allowed values or bound")


class ServiceErrorDetails(ErrorDetails):
    """Which collaborator failed and where"""

    service_name: str = Field(description="Voyage AI, Neo4j, blob_store, ...")
    endpoint: str | None = Field(None, description="URI, index name or API path")
    status_code: int | None = None
    request_id: str | None = None


class StorageErrorDetails(ServiceErrorDetails):
    object_key: str | None = Field(None, description="Blob key, e.g. chunks/<hash>.json")


class IngestErrorDetails(ErrorDetails):
    """Outcome of an ingest call in which no chunk was written"""

    entity_name: str
    total_chunks: int
    failed_chunks: int


class ApplicationError(Exception):
    """Base class for all application errors"""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: ErrorDetails | dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.level = level

        if details is None:
            details = ErrorDetails(source="unknown", operation="unknown")
        elif isinstance(details, dict):
            extra = dict(details)
            details = ErrorDetails(
                source=extra.pop("source", "unknown"),
                operation=extra.pop("operation", "unknown"),
                **extra,
            )
        self.details: ErrorDetails = details

        super().__init__(message)
