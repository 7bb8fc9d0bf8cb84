"""Tests for the search orchestration service."""

import pytest
from conftest import DIMENSION, BrokenSearchStore, FakeVectorProvider, make_record

from prompt_search.entities import ScoreWeights
from prompt_search.errors import (
    EmbeddingUnavailable,
    GenerationUnavailable,
    InvalidInput,
    NotFound,
    OperationTimeout,
    SearchFailed,
)
from prompt_search.protocols import TaskHint
from prompt_search.repositories import InMemoryRecordStore
from prompt_search.services import EmbeddingCache, RemoteRanker, SearchService
from prompt_search.text import address_of


def build_service(store, provider, timeout=1.0, generator=None):
    return SearchService(
        store=store,
        embedding_cache=EmbeddingCache(store=store, provider=provider, dimension=DIMENSION, timeout=timeout),
        ranker=RemoteRanker(store, timeout=timeout),
        generator=generator,
        default_k=5,
        timeout=timeout,
    )


async def seed(service):
    await service.ingest("Write a haiku about the ocean", category="poetry", votes=10, quality_score=4.5)
    await service.ingest("Summarize this legal contract", category="legal", votes=3, quality_score=2.0)
    await service.ingest("Explain recursion to a child", category="education", votes=40, quality_score=9.0)


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "\n\t"])
async def test_blank_query_is_invalid(search_service, provider, query):
    with pytest.raises(InvalidInput):
        await search_service.search(query)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_search_returns_ranked_results(search_service):
    await seed(search_service)

    results = await search_service.search("ocean poem", ScoreWeights(0.5), k=2)

    assert len(results) == 2
    assert [r.rank for r in results] == [0, 1]
    assert results[0].score >= results[1].score


@pytest.mark.asyncio
async def test_search_uses_query_cache(search_service, provider):
    await seed(search_service)

    await search_service.search("ocean poem")
    await search_service.search("  OCEAN poem ")

    query_calls = [call for call in provider.calls if call[1] is TaskHint.QUERY]
    assert query_calls == [("ocean poem", TaskHint.QUERY)]


@pytest.mark.asyncio
async def test_search_with_k_zero_is_empty(search_service):
    await seed(search_service)
    assert await search_service.search("anything", k=0) == []


@pytest.mark.asyncio
async def test_search_on_empty_store_is_empty(search_service):
    assert await search_service.search("anything") == []


@pytest.mark.asyncio
async def test_local_and_remote_services_agree(search_service, local_search_service):
    await seed(search_service)

    for alpha in (0.0, 0.5, 1.0):
        remote = await search_service.search("recursion", ScoreWeights(alpha))
        local = await local_search_service.search("recursion", ScoreWeights(alpha))

        assert [r.id for r in remote] == [r.id for r in local]
        assert [r.score for r in remote] == pytest.approx([r.score for r in local])


@pytest.mark.asyncio
async def test_provider_failure_is_search_failed_with_cause(store):
    service = build_service(store, FakeVectorProvider(fail=True))

    with pytest.raises(SearchFailed) as exc_info:
        await service.search("hello")

    error = exc_info.value
    assert isinstance(error.__cause__, EmbeddingUnavailable)
    assert error.root_code == "embedding_unavailable"
    assert error.status_code == 502


@pytest.mark.asyncio
async def test_store_failure_is_search_failed(provider):
    service = build_service(BrokenSearchStore(), provider)

    with pytest.raises(SearchFailed) as exc_info:
        await service.search("hello")

    assert exc_info.value.root_code == "store_unavailable"
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_timeout_is_distinguishable(store):
    service = build_service(store, FakeVectorProvider(delay=0.5), timeout=0.05)

    with pytest.raises(SearchFailed) as exc_info:
        await service.search("hello")

    assert exc_info.value.root_code == "timeout"
    assert exc_info.value.status_code == 504
    assert exc_info.value.to_dict()["code"] == "search_failed"


@pytest.mark.asyncio
async def test_ingest_stores_exact_content(search_service):
    content = "  Keep    my spacing\nand CASE  "
    record = await search_service.ingest(content, category="misc", votes=2, quality_score=1.5)

    assert record.id is not None
    fetched = await search_service.get_prompt(record.id)
    assert fetched.content == content
    assert fetched.category == "misc"
    assert fetched.votes == 2
    assert fetched.quality_score == 1.5
    assert len(fetched.embedding) == DIMENSION


@pytest.mark.asyncio
async def test_ingest_embeds_as_document_without_caching(search_service, store, provider):
    await search_service.ingest("Some Prompt")

    assert provider.calls == [("some prompt", TaskHint.DOCUMENT)]
    assert await store.get_cache_entry(address_of("some prompt")) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"content": "   "},
        {"content": "ok", "votes": -1},
        {"content": "ok", "votes": 1.5},
        {"content": "ok", "quality_score": "great"},
        {"content": "ok", "quality_score": float("inf")},
    ],
)
async def test_ingest_rejects_invalid_fields(search_service, provider, kwargs):
    with pytest.raises(InvalidInput):
        await search_service.ingest(**kwargs)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_get_missing_prompt_is_not_found(search_service):
    with pytest.raises(NotFound):
        await search_service.get_prompt(999)


@pytest.mark.asyncio
async def test_list_prompts_hides_content(search_service):
    await seed(search_service)

    summaries = await search_service.list_prompts()

    assert len(summaries) == 3
    assert {s.category for s in summaries} == {"poetry", "legal", "education"}
    for summary in summaries:
        assert not hasattr(summary, "content")
        assert not hasattr(summary, "embedding")


@pytest.mark.asyncio
async def test_list_prompts_newest_first(search_service):
    await seed(search_service)

    ids = [s.id for s in await search_service.list_prompts()]

    assert ids == sorted(ids, reverse=True)


@pytest.mark.asyncio
async def test_execute_joins_content_and_input(search_service, generator):
    record = await search_service.ingest("Translate to French:")

    output = await search_service.execute(record.id, "good morning")

    assert generator.prompts == ["Translate to French:\n\ngood morning"]
    assert output == "generated: od morning"


@pytest.mark.asyncio
async def test_execute_requires_input(search_service):
    record = await search_service.ingest("Translate to French:")
    with pytest.raises(InvalidInput):
        await search_service.execute(record.id, "  ")


@pytest.mark.asyncio
async def test_execute_missing_prompt_is_not_found(search_service):
    with pytest.raises(NotFound):
        await search_service.execute(42, "hello")


@pytest.mark.asyncio
async def test_execute_without_generator(store, provider):
    service = build_service(store, provider)
    record = await service.ingest("Translate to French:")

    with pytest.raises(GenerationUnavailable):
        await service.execute(record.id, "hello")


@pytest.mark.asyncio
async def test_stats_include_cache_and_ranker(search_service):
    await seed(search_service)
    await search_service.search("ocean")
    await search_service.search("ocean")

    stats = await search_service.get_stats()

    assert stats["total_prompts"] == 3
    assert stats["ranker_mode"] == "remote"
    assert stats["embedding_model"] == "fake-embedder"
    assert stats["cache"]["hits"] == 1
    assert stats["cache"]["misses"] == 1


@pytest.mark.asyncio
async def test_health(search_service, store):
    assert await search_service.is_healthy() is True

    failing = build_service(store, FakeVectorProvider(fail=True))
    assert await failing.is_healthy() is False


@pytest.mark.asyncio
async def test_create_wires_cache_to_provider_dimension(store):
    provider = FakeVectorProvider(dimension=12)
    service = SearchService.create(store=store, provider=provider, ranker_mode="local", timeout=1.0)

    assert service.embedding_cache.dimension == 12
    assert service.ranker.mode == "local"


@pytest.mark.asyncio
async def test_explicit_zero_default_k_is_honored(store, provider):
    service = SearchService(
        store=store,
        embedding_cache=EmbeddingCache(store=store, provider=provider, dimension=DIMENSION, timeout=1.0),
        ranker=RemoteRanker(store, timeout=1.0),
        default_k=0,
        timeout=1.0,
    )
    await seed(service)

    assert await service.search("ocean") == []
    assert await service.keyword_search("ocean") == []


@pytest.mark.asyncio
async def test_ingest_honors_timeout_override(store):
    service = build_service(store, FakeVectorProvider(delay=0.5), timeout=1.0)

    with pytest.raises(OperationTimeout):
        await service.ingest("Write a haiku", timeout=0.05)
    assert await store.list_records() == []


@pytest.mark.asyncio
async def test_keyword_search_matches_terms(search_service, provider):
    await seed(search_service)
    calls_before = len(provider.calls)

    results = await search_service.keyword_search("haiku about recursion")

    ids = [r.id for r in results]
    assert len(ids) == 2
    assert [r.rank for r in results] == [0, 1]
    contents = [(await search_service.get_prompt(i)).content for i in ids]
    # "about" and "haiku" both occur in the first seeded prompt
    assert contents[0] == "Write a haiku about the ocean"
    assert contents[1] == "Explain recursion to a child"
    assert len(provider.calls) == calls_before
    assert search_service.embedding_cache.stats()["misses"] == 0


@pytest.mark.asyncio
async def test_keyword_search_without_matches(search_service):
    await seed(search_service)
    assert await search_service.keyword_search("spreadsheet") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "  "])
async def test_keyword_search_rejects_blank_query(search_service, query):
    with pytest.raises(InvalidInput):
        await search_service.keyword_search(query)


class BrokenKeywordStore(InMemoryRecordStore):
    async def keyword_search(self, query_text, match_count):
        raise ConnectionError("full-text query failed")


@pytest.mark.asyncio
async def test_keyword_search_store_failure_is_search_failed(provider):
    service = build_service(BrokenKeywordStore(), provider)

    with pytest.raises(SearchFailed) as exc_info:
        await service.keyword_search("python")

    assert exc_info.value.root_code == "store_unavailable"
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_in_memory_keyword_search_limits_and_ties(store):
    for text in ["Python email parser", "python loops", "Email etiquette", "A dragon story"]:
        await store.insert_record(make_record(0, [1.0] * DIMENSION, content=text))

    results = await store.keyword_search("Python, email!", 5)
    assert [(r.id, r.score) for r in results] == [(1, 2.0), (2, 1.0), (3, 1.0)]

    assert [r.id for r in await store.keyword_search("python email", 1)] == [1]
    assert await store.keyword_search("python", 0) == []
