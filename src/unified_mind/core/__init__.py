from .base import (
    ApplicationError,
    ErrorCode,
    ErrorLevel,
    ServiceErrorDetails,
)
from .errors import (
    AuthenticationError,
    EmbeddingError,
    InputValidationError,
    ProcessingError,
    ServiceError,
    StorageError,
)
