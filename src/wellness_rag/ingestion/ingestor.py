"""Document ingestor — scrape, chunk, embed and store a list of URLs.

Processing is strictly serial: one URL at a time and, within a URL, one
chunk at a time.  A chunk is counted as stored only after the vector
store has acknowledged the insert.  Failures are captured per item into
an :class:`IngestionReport` and never abort the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from wellness_rag.errors import FetchError, ProviderError, StoreError
from wellness_rag.ingestion.chunker import split_text
from wellness_rag.ingestion.scraper import Scraper
from wellness_rag.providers.embeddings import EmbeddingClient
from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retrieval.models import StoredRecord
from wellness_rag.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


@dataclass
class IngestionFailure:
    """One item that could not be ingested.

    Attributes
    ----------
    url:
        Source URL the failure belongs to.
    stage:
        ``"fetch"``, ``"embed"`` or ``"store"``.
    error:
        Human-readable error text (for logs, never for end users).
    chunk_index:
        Position of the failing chunk, ``None`` for whole-URL failures.
    """

    url: str
    stage: str
    error: str
    chunk_index: int | None = None


@dataclass
class IngestionReport:
    """Outcome of one ingestion run."""

    urls_processed: int = 0
    chunks_stored: int = 0
    failures: list[IngestionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        return (
            f"Processed {self.urls_processed} URL(s), stored {self.chunks_stored} "
            f"chunk(s), {len(self.failures)} failure(s)"
        )


class DocumentIngestor:
    """Turns source URLs into stored, embedded chunks.

    Parameters
    ----------
    scraper:
        Fetches page text.
    embedder:
        Embeds each chunk; wrapped in the retry policy.
    store:
        Receives one record per chunk.
    chunk_size / chunk_overlap:
        Chunker parameters.
    retry_policy:
        Applied to each embedding call independently.
    """

    def __init__(
        self,
        scraper: Scraper,
        embedder: EmbeddingClient,
        store: VectorStoreBase,
        *,
        chunk_size: int = 512,
        chunk_overlap: int = 100,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._scraper = scraper
        self._embedder = embedder
        self._store = store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._retry_policy = retry_policy or RetryPolicy()

    async def ingest(self, urls: list[str]) -> IngestionReport:
        """Ingest every URL in order and return the run report."""
        report = IngestionReport()
        for url in urls:
            await self._ingest_url(url, report)
            report.urls_processed += 1
        logger.info(report.summary())
        for failure in report.failures:
            logger.error(
                "Ingestion failure: url=%s stage=%s chunk=%s error=%s",
                failure.url,
                failure.stage,
                failure.chunk_index,
                failure.error,
            )
        return report

    async def _ingest_url(self, url: str, report: IngestionReport) -> None:
        try:
            text = await self._scraper.scrape(url)
        except FetchError as exc:
            logger.error("✗ %s: %s", url, exc)
            report.failures.append(IngestionFailure(url=url, stage="fetch", error=str(exc)))
            return

        chunks = split_text(text, chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap)
        logger.info("%s → %d chunk(s) from %d chars", url, len(chunks), len(text))

        stored = 0
        for index, chunk in enumerate(chunks):
            if await self._ingest_chunk(url, index, chunk, report):
                stored += 1
        report.chunks_stored += stored
        logger.info("✓ %s (%d/%d chunks stored)", url, stored, len(chunks))

    async def _ingest_chunk(self, url: str, index: int, chunk: str, report: IngestionReport) -> bool:
        try:
            vector = await with_retry(
                lambda: self._embedder.embed(chunk),
                self._retry_policy,
                operation_name=f"embed chunk {index} of {url}",
            )
        except ProviderError as exc:
            report.failures.append(
                IngestionFailure(url=url, stage="embed", error=str(exc), chunk_index=index)
            )
            return False

        try:
            record_id = await self._store.insert(StoredRecord(vector=vector, text=chunk))
        except StoreError as exc:
            report.failures.append(
                IngestionFailure(url=url, stage="store", error=str(exc), chunk_index=index)
            )
            return False

        logger.debug("Stored chunk %d of %s as %s", index, url, record_id)
        return True
