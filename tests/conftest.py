"""Shared pytest configuration, fakes and fixtures.

Nothing here talks to a real provider, vector database or SQL server.
"""

from __future__ import annotations

import asyncio

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from rag_chat.embedding.client import EmbeddingClient
from rag_chat.retrieval.memory_store import InMemoryVectorIndex
from rag_chat.storage.memory import InMemoryCheckpointStore, InMemoryConversationStore

DIMENSION = 8


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ───────────────────────────────────────────────────────────────


class FakeEmbeddings(Embeddings):
    """Deterministic letter-histogram embeddings.

    Texts sharing letters end up close in cosine space, which is enough to
    make nearest-neighbour ordering predictable in tests.

    Parameters
    ----------
    fail_on:
        Texts for which the provider raises ``ConnectionError``.
    pause:
        Seconds each call awaits, to exercise interleaving and timeouts.
    """

    def __init__(
        self,
        dimension: int = DIMENSION,
        *,
        fail_on: set[str] | None = None,
        pause: float = 0.0,
    ) -> None:
        self.dimension = dimension
        self.fail_on = fail_on or set()
        self.pause = pause
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.fail_on:
            raise ConnectionError(f"provider unavailable for {text[:20]!r}")
        vector = [0.0] * self.dimension
        for ch in text.lower():
            if ch.isalpha():
                vector[ord(ch) % self.dimension] += 1.0
        return vector

    async def aembed_query(self, text: str) -> list[float]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.pause:
                await asyncio.sleep(self.pause)
            return self.embed_query(text)
        finally:
            self.in_flight -= 1


class CountingVectorIndex(InMemoryVectorIndex):
    """In-memory index that counts upsert batches."""

    def __init__(self, collection_name: str = "memory") -> None:
        super().__init__(collection_name)
        self.upsert_calls = 0

    async def upsert(self, records) -> None:
        self.upsert_calls += 1
        await super().upsert(records)


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested pauses."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def embedding_client(fake_embeddings: FakeEmbeddings, recording_sleep: RecordingSleep) -> EmbeddingClient:
    return EmbeddingClient(
        fake_embeddings,
        dimension=DIMENSION,
        delay_seconds=1.0,
        timeout_seconds=5.0,
        sleep=recording_sleep,
    )


@pytest.fixture()
def memory_index() -> CountingVectorIndex:
    return CountingVectorIndex("test-collection")


@pytest.fixture()
def checkpoints() -> InMemoryCheckpointStore:
    return InMemoryCheckpointStore()


@pytest.fixture()
def conversations() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture()
def fake_llm() -> FakeListChatModel:
    return FakeListChatModel(responses=["Kubeflow is an ML platform on Kubernetes."])


@pytest.fixture()
def embeddings_factory() -> type[FakeEmbeddings]:
    """The :class:`FakeEmbeddings` class, for tests that need custom failure modes."""
    return FakeEmbeddings
