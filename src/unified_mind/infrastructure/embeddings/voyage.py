"""Voyage AI embedding service."""

from typing import Any, cast

import voyageai

from unified_mind.core.base import ErrorLevel, ServiceErrorDetails
from unified_mind.core.config import Settings, settings
from unified_mind.core.decorators import with_error_handling
from unified_mind.core.errors import AuthenticationError, EmbeddingError, ProcessingError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import EmbeddingType

logger = get_logger(__name__)

MODEL_DIMENSIONS = {
    "voyage-01": 1024,
    "voyage-02": 1536,
    "voyage-large-2": 1536,
    "voyage-code-2": 1536,
    "voyage-3-large": 1024,
    "voyage-3": 1024,
    "voyage-3-lite": 512,
    "voyage-3.5": 1024,
    "voyage-3.5-lite": 1024,
}


class VoyageEmbeddingService:
    """Voyage AI embedding service implementation.

    Documents and queries are embedded with the matching Voyage ``input_type``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        config: Settings | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the Voyage embedding service.

        Args:
            api_key: Optional key override (defaults to VOYAGE_API_KEY from settings)
            model: Optional model override (defaults to settings.voyage_model)
            config: Settings to read defaults from
            client: Pre-built ``voyageai.AsyncClient``-compatible client

        Raises:
            AuthenticationError: If the API key is not configured
        """
        config = config or settings
        self.model = model or config.voyage_model

        if client is None:
            api_key = api_key or config.voyage_api_key
            if not api_key:
                raise AuthenticationError(
                    message="Voyage API key not found in settings",
                    details=ServiceErrorDetails(
                        source="VoyageEmbeddingService",
                        operation="initialization",
                        service_name="Voyage AI",
                    ),
                )
            client = voyageai.AsyncClient(api_key=api_key)

        self.client = client

    @with_error_handling(error_level=ErrorLevel.ERROR)
    async def embed_text(
        self, text: str, embedding_type: EmbeddingType = EmbeddingType.DOCUMENT
    ) -> list[float]:
        """Generate an embedding vector for the provided text."""
        if not text.strip():
            raise ProcessingError(
                message="Cannot embed empty text",
                details={"source": "voyage_embedding", "operation": "embed_text", "text_length": len(text)},
            )

        try:
            response = await self.client.embed(
                texts=[text],
                model=self.model,
                input_type=embedding_type.value,
            )
        except Exception as e:
            raise EmbeddingError(
                message=f"Voyage embedding request failed: {e!s}",
                details=ServiceErrorDetails(
                    source="VoyageEmbeddingService",
                    operation="embed_text",
                    service_name="Voyage AI",
                    endpoint="/embeddings",
                ),
            ) from e

        embeddings = getattr(response, "embeddings", [])
        if not embeddings:
            raise EmbeddingError(
                message="Voyage API returned no embeddings",
                details=ServiceErrorDetails(
                    source="VoyageEmbeddingService",
                    operation="embed_text",
                    service_name="Voyage AI",
                    endpoint="/embeddings",
                    status_code=200,  # API returned 200 but bad data
                ),
            )

        logger.debug(f"Embedded {len(text)} chars with {self.model}")
        return cast("list[float]", list(embeddings[0]))

    def get_model_dimensions(self) -> int:
        """Dimensionality of the configured Voyage model."""
        return MODEL_DIMENSIONS.get(self.model, 1024)
