"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar
from urllib.parse import urlparse
from uuid import uuid4

import chromadb

from wellness_rag.config import Settings, SimilarityMetric
from wellness_rag.errors import StoreError
from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retrieval.models import StoredRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Chroma's names for the supported similarity metrics.
_SPACE_MAP: dict[str, str] = {
    "dot_product": "ip",
    "cosine": "cosine",
    "euclidean": "l2",
}


def build_chroma_client(settings: Settings) -> Any:
    """Create a ``chromadb.HttpClient`` from the configured endpoint URL."""
    parsed = urlparse(settings.chroma_endpoint)
    ssl = parsed.scheme == "https"
    port = parsed.port or (443 if ssl else 8000)
    return chromadb.HttpClient(
        host=parsed.hostname or settings.chroma_endpoint,
        port=port,
        ssl=ssl,
        headers={"x-chroma-token": settings.chroma_token},
        tenant=settings.chroma_tenant,
        database=settings.chroma_namespace,
    )


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Every Chroma call is blocking, so it runs in a worker thread under
    ``asyncio.wait_for``; a call that exceeds *timeout* raises
    :class:`StoreError` instead of hanging the event loop.

    Parameters
    ----------
    client:
        A Chroma client (``HttpClient`` in production, a fake in tests).
    collection_name:
        Name of the Chroma collection.
    dimension:
        Expected embedding dimension.
    metric:
        Similarity metric fixed at collection creation.
    timeout:
        Seconds allowed per store call.
    """

    def __init__(
        self,
        client: Any,
        collection_name: str,
        *,
        dimension: int = 1536,
        metric: SimilarityMetric = "dot_product",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(collection_name, dimension)
        if metric not in _SPACE_MAP:
            raise ValueError(f"Unsupported similarity metric: {metric!r}")
        self.metric = metric
        self._client = client
        self._timeout = timeout
        self._collection: Any = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ChromaVectorStore:
        return cls(
            build_chroma_client(settings),
            settings.chroma_collection,
            dimension=settings.embedding_dimension,
            metric=settings.similarity_metric,
            timeout=settings.store_timeout_seconds,
        )

    # -- VectorStoreBase overrides --------------------------------------------

    async def create_collection(self) -> None:
        space = _SPACE_MAP[self.metric]

        def _create() -> Any:
            return self._client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": space},
            )

        collection = await self._run(_create, "create_collection")
        existing = (collection.metadata or {}).get("hnsw:space", "l2")
        if existing != space:
            raise StoreError(
                f"Collection {self.collection_name!r} already exists with metric "
                f"{existing!r}, expected {space!r}"
            )
        self._collection = collection
        logger.info("Collection %r ready (metric=%s)", self.collection_name, self.metric)

    async def insert(self, record: StoredRecord) -> str:
        self._check_dimension(record.vector)
        record_id = uuid4().hex

        def _add() -> None:
            self._get_collection().add(
                ids=[record_id],
                embeddings=[record.vector],
                documents=[record.text],
            )

        await self._run(_add, "insert")
        return record_id

    async def search(self, query_vector: list[float], k: int = 5) -> list[StoredRecord]:
        self._check_dimension(query_vector)

        def _query() -> dict[str, Any]:
            return self._get_collection().query(
                query_embeddings=[query_vector],
                n_results=k,
                include=["documents", "distances"],
            )

        results = await self._run(_query, "search")

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits = [
            StoredRecord(text=doc or "", id=doc_id, distance=dist)
            for doc_id, doc, dist in zip(ids, docs, distances)
        ]
        # Chroma already orders by distance; keep the contract explicit.
        hits.sort(key=lambda r: r.distance if r.distance is not None else float("inf"))
        return hits[:k]

    async def health_check(self) -> bool:
        try:
            await self._run(self._client.heartbeat, "heartbeat")
            return True
        except StoreError:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _get_collection(self) -> Any:
        if self._collection is None:
            self._collection = self._client.get_collection(name=self.collection_name)
        return self._collection

    async def _run(self, fn: Callable[[], T], operation: str) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn), timeout=self._timeout)
        except asyncio.CancelledError:
            raise
        except StoreError:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreError(f"Chroma {operation} timed out after {self._timeout}s") from exc
        except Exception as exc:
            raise StoreError(f"Chroma {operation} failed: {exc}") from exc
