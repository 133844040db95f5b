"""One-shot ingestion job: load the expert-article corpus into the store.

Run with ``wellness-rag-ingest`` or ``python -m wellness_rag.ingestion.job``.
There are no flags; the URL list and chunking parameters below drive the
run, and connection details come from the environment.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from wellness_rag.config import Settings, get_settings
from wellness_rag.errors import StoreError
from wellness_rag.ingestion.ingestor import DocumentIngestor, IngestionReport
from wellness_rag.ingestion.scraper import PlaywrightScraper
from wellness_rag.logging_config import configure_logging
from wellness_rag.providers.embeddings import OpenAIEmbeddingClient
from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retrieval.chroma_store import ChromaVectorStore
from wellness_rag.retry import RetryPolicy

logger = logging.getLogger(__name__)

SOURCE_URLS: list[str] = [
    "https://www.saragottfriedmd.com/filling-the-gaps-in-womens-health-personalized-guidance-is-essential/",
    "https://www.saragottfriedmd.com/women-and-autoimmune-disease-why-are-our-rates-higher/",
    "https://www.saragottfriedmd.com/hormone-imbalance-lets-stop-normalizing-it/",
    "https://www.saragottfriedmd.com/unlock-the-secrets-to-hormone-health-for-longevity-and-vitality/",
    "https://drmindypelz.com/the-art-of-intuitive-fasting-with-dr-will-cole/",
    "https://drmindypelz.com/lifestyle-hacks-to-naturally-balance-hormones-with-dr-stephanie-estima/",
    "https://drmindypelz.com/ep257/",
    "https://drmindypelz.com/ep264/",
    "https://www.natniddam.com/blog/supplementing-for-brain-health-a-comprehensive-guide-on-how-to-do-it-right/",
    "https://www.kaylabarnes.com/articles/muscle-an-organ-of-longevity",
    "https://www.kaylabarnes.com/articles/fasting-for-women",
    "https://www.kaylabarnes.com/articles/circadian-rhythms-why-it-matters-amp-how-to-optimise-yours",
    "https://www.kaylabarnes.com/articles/where-i-would-start-with-health-optimization-as-a-woman-extended-version",
]

CHUNK_SIZE = 512
CHUNK_OVERLAP = 100


async def run(
    settings: Settings,
    *,
    urls: list[str] | None = None,
    store: VectorStoreBase | None = None,
    ingestor: DocumentIngestor | None = None,
) -> IngestionReport:
    """Create the collection, then ingest *urls* (default: :data:`SOURCE_URLS`)."""
    store = store or ChromaVectorStore.from_settings(settings)
    await store.create_collection()

    if ingestor is None:
        ingestor = DocumentIngestor(
            PlaywrightScraper(timeout=settings.scrape_timeout_seconds),
            OpenAIEmbeddingClient.from_settings(settings),
            store,
            chunk_size=CHUNK_SIZE,
            chunk_overlap=CHUNK_OVERLAP,
            retry_policy=RetryPolicy(
                max_attempts=settings.retry_max_attempts,
                initial_delay=settings.retry_initial_delay,
                max_delay=settings.retry_max_delay,
            ),
        )
    return await ingestor.ingest(urls if urls is not None else SOURCE_URLS)


def main() -> int:
    """Console entry point; returns a non-zero exit code if anything failed."""
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        report = asyncio.run(run(settings))
    except StoreError:
        logger.exception("Could not prepare collection %r", settings.chroma_collection)
        return 1
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
