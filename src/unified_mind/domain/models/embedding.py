"""Embedding models."""

from enum import Enum


class EmbeddingType(str, Enum):
    """Which side of a retrieval pair a text is embedded for."""

    DOCUMENT = "document"
    QUERY = "query"
