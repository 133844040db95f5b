"""Shared pytest configuration and fixtures.

The fakes below stand in for the remote clients so that no test touches
the network, a browser, or a real vector store.
"""

from __future__ import annotations

import pytest

from wellness_rag.chat.models import ConversationMessage
from wellness_rag.errors import FetchError, StoreError
from wellness_rag.ingestion.scraper import Scraper
from wellness_rag.providers.embeddings import EmbeddingClient
from wellness_rag.providers.llm import GenerationClient
from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retrieval.models import StoredRecord

FAKE_DIMENSION = 4


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ─────────────────────────────────────────────────────────────


class FakeEmbeddingClient(EmbeddingClient):
    """Returns a deterministic vector; optionally raises queued errors first."""

    dimension = FAKE_DIMENSION

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.errors: list[Exception] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.errors:
            raise self.errors.pop(0)
        return [float(len(text)), 1.0, 0.0, 0.0]


class FakeGenerationClient(GenerationClient):
    """Records every prompt and answers with a canned reply."""

    def __init__(self, reply: str = "Generated answer.") -> None:
        self.reply = reply
        self.calls: list[list[ConversationMessage]] = []
        self.errors: list[Exception] = []

    async def generate(self, messages: list[ConversationMessage]) -> str:
        self.calls.append(list(messages))
        if self.errors:
            raise self.errors.pop(0)
        return self.reply


class FakeVectorStore(VectorStoreBase):
    """In-memory store that returns canned search hits."""

    def __init__(self, hits: list[str] | None = None) -> None:
        super().__init__("test-collection", FAKE_DIMENSION)
        self.hits = hits or []
        self.records: list[StoredRecord] = []
        self.search_calls: list[tuple[list[float], int]] = []
        self.fail_search = False
        self.fail_insert_at: set[int] = set()
        self.insert_attempts = 0
        self.created = False

    async def create_collection(self) -> None:
        self.created = True

    async def insert(self, record: StoredRecord) -> str:
        self._check_dimension(record.vector)
        attempt = self.insert_attempts
        self.insert_attempts += 1
        if attempt in self.fail_insert_at:
            raise StoreError("insert refused")
        self.records.append(record)
        return f"rec-{len(self.records)}"

    async def search(self, query_vector: list[float], k: int = 5) -> list[StoredRecord]:
        self.search_calls.append((query_vector, k))
        if self.fail_search:
            raise StoreError("connection refused")
        return [StoredRecord(text=t, distance=float(i)) for i, t in enumerate(self.hits[:k])]

    async def health_check(self) -> bool:
        return True


class FakeScraper(Scraper):
    """Serves page text from a dict; unknown URLs raise :class:`FetchError`."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def scrape(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "net::ERR_NAME_NOT_RESOLVED")
        return self.pages[url]


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def fake_embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture()
def fake_generator() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Populate every required setting with a dummy value."""
    monkeypatch.setenv("CHROMA_NAMESPACE", "wellness")
    monkeypatch.setenv("CHROMA_COLLECTION", "cycle_knowledge")
    monkeypatch.setenv("CHROMA_ENDPOINT", "https://chroma.example.test:8443")
    monkeypatch.setenv("CHROMA_TOKEN", "chroma-token")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


@pytest.fixture()
def fake_scraper() -> FakeScraper:
    return FakeScraper({})
