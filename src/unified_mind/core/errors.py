"""Specific error types for Unified Mind."""

from .base import (
    ApplicationError,
    ErrorCode,
    ErrorDetails,
    ErrorLevel,
    ServiceErrorDetails,
    StorageErrorDetails,
    ValidationErrorDetails,
)


class InputValidationError(ApplicationError):
    """Caller supplied a missing or malformed value; the operation was not attempted."""

    def __init__(
        self,
        message: str,
        details: ValidationErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.WARNING,
            details=details,
        )


class ServiceError(ApplicationError):
    """Error from external service calls."""

    def __init__(
        self,
        message: str,
        details: ServiceErrorDetails | None = None,
        code: ErrorCode = ErrorCode.SERVICE_UNAVAILABLE,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details or ServiceErrorDetails(
                source="service",
                operation="external_call",
                service_name="unknown"
            )
        )


class EmbeddingError(ServiceError):
    """The embedding collaborator failed to produce a vector."""

    def __init__(self, message: str, details: ServiceErrorDetails | None = None):
        super().__init__(message=message, details=details, code=ErrorCode.EMBEDDING_FAILED)


class StorageError(ServiceError):
    """The blob store rejected or failed an operation."""

    def __init__(self, message: str, details: StorageErrorDetails | None = None):
        super().__init__(message=message, details=details, code=ErrorCode.STORAGE_OPERATION)


class AuthenticationError(ApplicationError):
    """Authentication-related errors."""

    def __init__(self, message: str, details: ErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHENTICATION_FAILED,
            level=ErrorLevel.ERROR,
            details=details
        )


class ProcessingError(ApplicationError):
    """General processing errors."""

    def __init__(self, message: str, details: ErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.PROCESSING_FAILED,
            level=ErrorLevel.ERROR,
            details=details
        )
