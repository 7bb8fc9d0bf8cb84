"""Shared fakes and fixtures for the prompt search tests."""

import asyncio
import hashlib

import pytest

from prompt_search.entities import PromptRecordEntity
from prompt_search.protocols import TaskHint
from prompt_search.repositories import InMemoryRecordStore
from prompt_search.services import EmbeddingCache, SearchService
from prompt_search.services.ranking import HybridRanker, LocalRanker, RemoteRanker

DIMENSION = 8


class FakeVectorProvider:
    """Deterministic embedder that records every call."""

    def __init__(
        self,
        dimension: int = DIMENSION,
        delay: float = 0.0,
        fail: bool = False,
        salt: str = "",
        fail_on: set[str] | None = None,
    ) -> None:
        self._dimension = dimension
        self.delay = delay
        self.fail = fail
        self.salt = salt
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, TaskHint]] = []
        self.active = 0
        self.max_active = 0

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-embedder"

    def vector_for(self, text: str) -> list[float]:
        digest = hashlib.sha256(f"{self.salt}{text}".encode()).digest()
        return [b / 255.0 + 0.01 for b in digest[: self._dimension]]

    async def embed(self, text: str, task_hint: TaskHint = TaskHint.QUERY) -> list[float]:
        self.calls.append((text, task_hint))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail or text in self.fail_on:
                raise RuntimeError("provider down")
            return self.vector_for(text)
        finally:
            self.active -= 1

    async def is_available(self) -> bool:
        return not self.fail


class FakeTextGenerator:
    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return f"generated: {prompt[-10:]}"


class UpsertFailingStore(InMemoryRecordStore):
    async def upsert_cache_entry(self, key, normalized_text, embedding):
        raise ConnectionError("cache table unavailable")


class SlowLookupStore(InMemoryRecordStore):
    async def get_cache_entry(self, key):
        await asyncio.sleep(1.0)
        return None


class BrokenSearchStore(InMemoryRecordStore):
    async def hybrid_search(self, query_embedding, alpha, match_count):
        raise ConnectionError("rpc failed")


def make_record(
    record_id: int,
    embedding: list[float],
    votes: int = 0,
    quality_score: float = 0.0,
    content: str = "prompt",
) -> PromptRecordEntity:
    return PromptRecordEntity(
        id=record_id,
        content=content,
        category="general",
        votes=votes,
        quality_score=quality_score,
        embedding=embedding,
    )


@pytest.fixture
def store():
    return InMemoryRecordStore(metadata_normalizer=200.0)


@pytest.fixture
def provider():
    return FakeVectorProvider()


@pytest.fixture
def embedding_cache(store, provider):
    return EmbeddingCache(store=store, provider=provider, dimension=DIMENSION, timeout=1.0)


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def search_service(store, embedding_cache, generator):
    return SearchService(
        store=store,
        embedding_cache=embedding_cache,
        ranker=RemoteRanker(store, timeout=1.0),
        generator=generator,
        default_k=5,
        timeout=1.0,
    )


@pytest.fixture
def local_search_service(store, embedding_cache, generator):
    return SearchService(
        store=store,
        embedding_cache=embedding_cache,
        ranker=LocalRanker(store, ranker=HybridRanker(200.0), timeout=1.0),
        generator=generator,
        default_k=5,
        timeout=1.0,
    )
