"""
Providers — embedding and chat-completion clients.

Both clients translate every SDK failure into a
:class:`~wellness_rag.errors.ProviderError` tagged with an
:class:`~wellness_rag.errors.ErrorKind`, so callers never handle
provider-specific exceptions.
"""

from wellness_rag.providers.embeddings import EmbeddingClient, OpenAIEmbeddingClient
from wellness_rag.providers.llm import GenerationClient, OpenAIGenerationClient

__all__ = [
    "EmbeddingClient",
    "GenerationClient",
    "OpenAIEmbeddingClient",
    "OpenAIGenerationClient",
]
