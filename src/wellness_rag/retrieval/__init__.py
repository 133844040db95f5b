"""
Retrieval — the vector store shared by ingestion and chat.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend (subclass for Astra, Qdrant, …).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`StoredRecord` — persisted chunk / search hit.
"""

from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retrieval.models import StoredRecord

__all__ = [
    "ChromaVectorStore",
    "StoredRecord",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from wellness_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
