"""Shared configuration loaded from environment / ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

SimilarityMetric = Literal["dot_product", "cosine", "euclidean"]


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    The vector-store and provider credentials have no defaults: a missing
    value raises :class:`pydantic.ValidationError` as soon as the settings
    are built, i.e. at process start rather than at the first remote call.
    """

    # Vector store (required)
    chroma_namespace: str = Field(description="Chroma database holding the collection")
    chroma_collection: str = Field(description="Name of the vector collection")
    chroma_endpoint: str = Field(description="Base URL of the Chroma server, e.g. 'https://chroma.internal:8000'")
    chroma_token: str = Field(description="Token sent in the x-chroma-token header")

    # Provider (required)
    openai_api_key: str = Field(description="Credential for the embedding and chat-completion APIs")

    # Vector store
    chroma_tenant: str = "default_tenant"
    similarity_metric: SimilarityMetric = "dot_product"
    store_timeout_seconds: float = 10.0

    # Embedding
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536

    # Generation
    llm_model_name: str = "gpt-4"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000
    provider_timeout_seconds: float = 30.0

    # Retrieval
    retrieval_top_k: int = 5

    # Ingestion
    chunk_size: int = 512
    chunk_overlap: int = 100
    scrape_timeout_seconds: float = 60.0

    # Retry
    retry_max_attempts: int = 3
    retry_initial_delay: float = 0.5
    retry_max_delay: float = 8.0

    # Serving
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build and cache the process-wide :class:`Settings`."""
    return Settings()  # type: ignore[call-arg]
