"""Configuration management."""

from pathlib import Path
from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CHARS_PER_TOKEN = 4


class ChunkingProfile(BaseModel):
    """Window width and overlap for the chunker, both in characters."""

    max_chars: int = Field(default=1600, ge=1, description="Maximum chunk width")
    overlap_chars: int = Field(default=200, ge=0, description="Characters shared by consecutive chunks")

    @classmethod
    def from_tokens(cls, max_tokens: int, overlap_tokens: int) -> Self:
        """Build a profile from token counts (a token is approximated as 4 characters)."""
        return cls(max_chars=max_tokens * CHARS_PER_TOKEN, overlap_chars=overlap_tokens * CHARS_PER_TOKEN)


class MemoryConfig(BaseModel):
    """Parameters shared by the memory writer, retriever and grounding assembler."""

    preview_length: int = Field(default=500, ge=1, description="Characters kept in text_preview")
    blob_threshold: int = Field(default=500, ge=0, description="Chunks longer than this are offloaded")
    fine_chunking: ChunkingProfile = Field(default_factory=lambda: ChunkingProfile.from_tokens(400, 50))

    search_default_limit: int = 10
    search_max_limit: int = 20
    search_default_min_score: float = Field(default=0.7, ge=0.0, le=1.0)

    grounding_limit: int = 20
    grounding_min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    grounding_default_max_tokens: int = 2000
    grounding_max_tokens_cap: int = 8000

    @model_validator(mode="after")
    def check_limits(self) -> Self:
        if self.search_default_limit > self.search_max_limit:
            raise ValueError("search_default_limit cannot exceed search_max_limit")
        return self


class Settings(BaseSettings):
    # API Keys
    voyage_api_key: str = ""
    voyage_model: str = "voyage-3"

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    vector_index_name: str = "unified_mind_embeddings"

    # Collaborators
    vector_backend: Literal["neo4j", "memory"] = Field(
        default="neo4j", description="'memory' keeps index, blobs and stats in-process (local dev only)"
    )
    blob_dir: Path = Path("./data/blobs")

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8787
    cors_origin: str = "*"
    service_name: str = "unified-mind"
    service_version: str = "1.0.0"

    # Chunking: fine profile in tokens, coarse (bulk) profile in characters
    max_chunk_tokens: int = Field(default=400, ge=1)
    chunk_overlap_tokens: int = Field(default=50, ge=0)
    bulk_chunk_size: int = Field(default=1500, ge=1)
    bulk_chunk_overlap: int = Field(default=200, ge=0)

    # Bulk ingestion client
    unified_mind_url: str = "http://localhost:8787/mcp"

    # App config
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra fields in .env file
        env_nested_delimiter="__",
    )

    @property
    def fine_chunking(self) -> ChunkingProfile:
        """Profile used by the protocol-driven ingest operation."""
        return ChunkingProfile.from_tokens(self.max_chunk_tokens, self.chunk_overlap_tokens)

    @property
    def coarse_chunking(self) -> ChunkingProfile:
        """Profile used for whole-document bulk ingestion."""
        return ChunkingProfile(max_chars=self.bulk_chunk_size, overlap_chars=self.bulk_chunk_overlap)

    @property
    def memory_config(self) -> MemoryConfig:
        return MemoryConfig(fine_chunking=self.fine_chunking)


settings = Settings()
