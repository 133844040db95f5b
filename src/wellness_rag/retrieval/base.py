"""Abstract base class for vector-store backends.

Adding a new backend (Astra, Qdrant, pgvector …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
methods.  The ingestor and the chat pipeline are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from wellness_rag.errors import StoreError
from wellness_rag.retrieval.models import StoredRecord


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Implementations must raise :class:`~wellness_rag.errors.StoreError` on
    any transport failure.  A failed search must never look like an empty
    result; whether to degrade is the caller's decision.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    dimension:
        Length every stored and query vector must have.
    """

    def __init__(self, collection_name: str, dimension: int) -> None:
        self.collection_name = collection_name
        self.dimension = dimension

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    async def create_collection(self) -> None:
        """Create the collection, or accept an existing one with matching config."""
        ...

    @abstractmethod
    async def insert(self, record: StoredRecord) -> str:
        """Append *record* and return its new id.  No dedup, no update."""
        ...

    @abstractmethod
    async def search(self, query_vector: list[float], k: int = 5) -> list[StoredRecord]:
        """Return at most *k* records, most similar first."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- shared helpers -------------------------------------------------------

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimension:
            raise StoreError(
                f"Vector has dimension {len(vector)}, collection "
                f"{self.collection_name!r} expects {self.dimension}"
            )
