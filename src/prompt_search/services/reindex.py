"""Bulk re-embedding of stored prompts.

Used after switching embedding models: every prompt's document embedding
is regenerated and replaced in place. Provider rate limits are respected
with bounded concurrency plus a fixed-interval throttle, both tunable.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from prompt_search.config import settings
from prompt_search.errors import PromptSearchError, StoreUnavailable
from prompt_search.protocols import RecordStore
from prompt_search.utils import call_with_timeout

from .embedding_cache import CachePolicy, EmbeddingCache

logger = logging.getLogger(__name__)


class IntervalThrottle:
    """Space out operation starts by at least ``interval`` seconds.

    The clock and sleep functions are injectable so tests run without
    real delays.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._next_at: float | None = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Block until the next slot is available, then claim it."""
        async with self._lock:
            now = self._clock()
            if self._next_at is not None and now < self._next_at:
                await self._sleep(self._next_at - now)
                now = self._next_at
            self._next_at = now + self._interval


@dataclass
class ReindexReport:
    """Outcome of a re-embedding run."""

    total: int = 0
    updated: int = 0
    failed: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "updated": self.updated,
            "failed": {str(record_id): message for record_id, message in self.failed.items()},
        }


class ReindexService:
    """Re-embed every stored prompt with a rate-limited task queue.

    Example:
        ```python
        cache = EmbeddingCache(store=store, provider=new_provider)
        report = await ReindexService(store, cache).run()
        ```
    """

    def __init__(
        self,
        store: RecordStore,
        embedding_cache: EmbeddingCache,
        concurrency: int | None = None,
        throttle: IntervalThrottle | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the re-embedding job.

        Args:
            store: Record store holding the prompts (required).
            embedding_cache: Cache wrapping the (new) embedding provider (required).
            concurrency: Maximum in-flight items. Defaults to settings.
            throttle: Start-rate limiter. Defaults to settings.reindex_interval.
            timeout: Per-call timeout in seconds. Defaults to settings.
        """
        self._store = store
        self._cache = embedding_cache
        self._concurrency = settings.reindex_concurrency if concurrency is None else concurrency
        if self._concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self._concurrency}")
        self._throttle = throttle or IntervalThrottle(settings.reindex_interval)
        self._timeout = settings.io_timeout if timeout is None else timeout

    async def run(self) -> ReindexReport:
        """Re-embed all prompts.

        Per-item failures are logged and reported; the run continues.

        Returns:
            ReindexReport with counts and failed ids
        """
        records = await call_with_timeout(
            self._store.fetch_candidates(),
            self._timeout,
            StoreUnavailable,
            "fetch prompts",
        )
        report = ReindexReport(total=len(records))
        logger.info("Re-embedding %d prompts (concurrency=%d)", report.total, self._concurrency)

        semaphore = asyncio.Semaphore(self._concurrency)

        async def reindex_one(record_id: int, content: str) -> None:
            async with semaphore:
                await self._throttle.wait()
                try:
                    embedding, _ = await self._cache.resolve(content, CachePolicy.DOCUMENT)
                    await call_with_timeout(
                        self._store.update_embedding(record_id, embedding),
                        self._timeout,
                        StoreUnavailable,
                        "update embedding",
                    )
                except PromptSearchError as e:
                    logger.error("Failed to re-embed prompt %s: %s", record_id, e.message)
                    report.failed[record_id] = e.message
                    return
                report.updated += 1
                logger.debug("Re-embedded prompt %s", record_id)

        await asyncio.gather(*(reindex_one(record.id, record.content) for record in records))

        logger.info(
            "Re-embedding complete: %d updated, %d failed",
            report.updated,
            len(report.failed),
        )
        return report
