"""Tests for bulk re-embedding."""

import pytest
from conftest import DIMENSION, FakeVectorProvider

from prompt_search.services import EmbeddingCache, IntervalThrottle, ReindexService


class FakeClock:
    """Manual clock whose sleep advances time instead of waiting."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


async def seed(service, count=3):
    ids = []
    for i in range(count):
        record = await service.ingest(f"prompt number {i}", votes=i)
        ids.append(record.id)
    return ids


def reindexer(store, provider, clock=None, concurrency=1, interval=0.2):
    clock = clock or FakeClock()
    return ReindexService(
        store=store,
        embedding_cache=EmbeddingCache(store=store, provider=provider, dimension=DIMENSION, timeout=1.0),
        concurrency=concurrency,
        throttle=IntervalThrottle(interval, clock=clock, sleep=clock.sleep),
        timeout=1.0,
    )


@pytest.mark.asyncio
async def test_throttle_spaces_out_starts():
    clock = FakeClock()
    throttle = IntervalThrottle(0.2, clock=clock, sleep=clock.sleep)

    for _ in range(3):
        await throttle.wait()

    assert clock.sleeps == pytest.approx([0.2, 0.2])


@pytest.mark.asyncio
async def test_throttle_does_not_sleep_when_interval_elapsed():
    clock = FakeClock()
    throttle = IntervalThrottle(0.2, clock=clock, sleep=clock.sleep)

    await throttle.wait()
    clock.now += 1.0
    await throttle.wait()

    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_reindex_replaces_embeddings(search_service, store):
    ids = await seed(search_service)
    new_provider = FakeVectorProvider(salt="v2")
    clock = FakeClock()

    report = await reindexer(store, new_provider, clock=clock).run()

    assert report.total == 3
    assert report.updated == 3
    assert report.failed == {}
    for record_id in ids:
        record = await store.get_record(record_id)
        assert record.embedding == pytest.approx(new_provider.vector_for(record.content.lower()))
    assert clock.sleeps == pytest.approx([0.2, 0.2])


@pytest.mark.asyncio
async def test_reindex_keeps_content_and_metadata(search_service, store):
    ids = await seed(search_service)
    before = {record_id: await store.get_record(record_id) for record_id in ids}

    await reindexer(store, FakeVectorProvider(salt="v2")).run()

    for record_id, old in before.items():
        new = await store.get_record(record_id)
        assert (new.content, new.votes, new.category) == (old.content, old.votes, old.category)
        assert new.embedding != old.embedding


@pytest.mark.asyncio
async def test_reindex_reports_failures_and_continues(search_service, store):
    ids = await seed(search_service)
    provider = FakeVectorProvider(salt="v2", fail_on={"prompt number 1"})

    report = await reindexer(store, provider).run()

    assert report.updated == 2
    assert list(report.failed) == [ids[1]]
    assert report.to_dict()["failed"] == {str(ids[1]): report.failed[ids[1]]}


@pytest.mark.asyncio
async def test_reindex_bounds_concurrency(search_service, store):
    await seed(search_service, count=6)
    provider = FakeVectorProvider(salt="v2", delay=0.01)

    report = await reindexer(store, provider, concurrency=2, interval=0.0).run()

    assert report.updated == 6
    assert provider.max_active <= 2


@pytest.mark.asyncio
async def test_reindex_does_not_touch_query_cache(search_service, store):
    await seed(search_service)
    stats_before = await store.get_stats()

    await reindexer(store, FakeVectorProvider(salt="v2")).run()

    assert (await store.get_stats())["cached_embeddings"] == stats_before["cached_embeddings"]


@pytest.mark.asyncio
async def test_reindex_empty_store(store):
    report = await reindexer(store, FakeVectorProvider()).run()
    assert (report.total, report.updated) == (0, 0)


@pytest.mark.asyncio
async def test_reindex_records_provider_error_message(search_service, store):
    await seed(search_service, count=1)

    report = await reindexer(store, FakeVectorProvider(fail=True)).run()

    assert report.updated == 0
    (message,) = report.failed.values()
    assert "provider down" in message


def test_zero_concurrency_is_rejected(store, provider):
    with pytest.raises(ValueError):
        reindexer(store, provider, concurrency=0)
