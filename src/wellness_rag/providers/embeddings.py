"""Embedding client — a thin wrapper over the OpenAI embeddings API."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from langchain_openai import OpenAIEmbeddings

from wellness_rag.config import Settings
from wellness_rag.providers.base import call_provider

logger = logging.getLogger(__name__)


class EmbeddingClient(ABC):
    """Turns a text span into a fixed-dimension vector."""

    dimension: int

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*; raises ``ProviderError`` on failure."""
        ...


class OpenAIEmbeddingClient(EmbeddingClient):
    """OpenAI-backed :class:`EmbeddingClient`.

    Parameters
    ----------
    api_key:
        Provider credential.
    model:
        Embedding model id; every stored vector and every query vector must
        come from the same model.
    dimension:
        Expected vector length for *model*.
    timeout:
        Upper bound in seconds on a single embedding call.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "text-embedding-3-small",
        dimension: int = 1536,
        timeout: float = 30.0,
    ) -> None:
        self.model = model
        self.dimension = dimension
        self._timeout = timeout
        # Retries are owned by wellness_rag.retry, not by the SDK.
        self._embedder = OpenAIEmbeddings(
            model=model,
            api_key=api_key,
            max_retries=0,
            request_timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIEmbeddingClient:
        return cls(
            settings.openai_api_key,
            model=settings.embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.provider_timeout_seconds,
        )

    async def embed(self, text: str) -> list[float]:
        vector = await call_provider(self._embedder.aembed_query(text), self._timeout)
        logger.debug("Embedded %d chars with %s", len(text), self.model)
        return vector
