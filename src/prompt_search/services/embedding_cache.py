"""Content-addressed embedding cache.

Resolves text to an embedding, reusing the stored vector for any query
whose normalized text has been embedded before. Document embeddings
(ingestion, re-indexing) go through the same path but never touch the
query cache.
"""

import asyncio
import logging
from enum import Enum

from prompt_search.config import settings
from prompt_search.errors import (
    EmbeddingUnavailable,
    MalformedCacheEntry,
    OperationTimeout,
    StoreUnavailable,
)
from prompt_search.protocols import RecordStore, TaskHint, VectorProvider
from prompt_search.text import address_of, normalize
from prompt_search.utils import call_with_timeout, parse_vector

logger = logging.getLogger(__name__)


class CachePolicy(str, Enum):
    """QUERY reads and writes the query cache; DOCUMENT bypasses it."""

    QUERY = "query"
    DOCUMENT = "document"


class EmbeddingCache:
    """Get-or-compute wrapper around the embedding provider.

    Concurrent resolves of the same key inside one process share a single
    provider call. Across processes duplicate calls can still happen; the
    upsert is idempotent so the last write simply wins.

    Example:
        ```python
        cache = EmbeddingCache(store=store, provider=provider)
        vector, was_hit = await cache.resolve("  Hello World  ")
        ```
    """

    def __init__(
        self,
        store: RecordStore,
        provider: VectorProvider,
        dimension: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the embedding cache.

        Args:
            store: Record store holding the cache entries (required).
            provider: Embedding generation service (required).
            dimension: Expected vector length. Defaults to settings.
            timeout: Per-call timeout in seconds. Defaults to settings.
        """
        self._store = store
        self._provider = provider
        self._dimension = settings.embedding_dimension if dimension is None else dimension
        self._timeout = settings.io_timeout if timeout is None else timeout
        self._inflight: dict[str, asyncio.Task] = {}
        self._hits = 0
        self._misses = 0

    async def resolve(
        self,
        text: str,
        policy: CachePolicy = CachePolicy.QUERY,
        timeout: float | None = None,
    ) -> tuple[list[float], bool]:
        """Resolve text to its embedding.

        Args:
            text: Raw text; normalized before hashing and embedding
            policy: QUERY uses the cache, DOCUMENT bypasses it
            timeout: Override the per-call timeout

        Returns:
            (embedding, was_hit). A hit returns the vector as the store
            persisted it: the Redis store packs float32, so a hit can differ
            from the float64 miss that wrote it by float32 rounding.

        Raises:
            InvalidInput: If the text is empty after trimming
            EmbeddingUnavailable: If the provider fails
            StoreUnavailable: If the cache lookup fails
            OperationTimeout: If a provider or store call times out
        """
        normalized = normalize(text)
        timeout = self._timeout if timeout is None else timeout

        if policy is CachePolicy.DOCUMENT:
            embedding = await self._embed(normalized, TaskHint.DOCUMENT, timeout)
            return embedding, False

        key = address_of(normalized)
        cached = await self._lookup(key, timeout)
        if cached is not None:
            self._hits += 1
            logger.debug("Cache hit for key %s", key)
            return cached, True

        self._misses += 1
        logger.info("Cache miss for key %s, generating embedding", key)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._compute_and_store(key, normalized, timeout))
            self._inflight[key] = task
            task.add_done_callback(lambda _done, key=key: self._inflight.pop(key, None))

        embedding = await asyncio.shield(task)
        return list(embedding), False

    async def _lookup(self, key: str, timeout: float) -> list[float] | None:
        entry = await call_with_timeout(
            self._store.get_cache_entry(key),
            timeout,
            StoreUnavailable,
            "cache lookup",
        )
        if entry is None:
            return None

        try:
            return parse_vector(entry.embedding, self._dimension)
        except MalformedCacheEntry as e:
            logger.warning("Ignoring malformed cache entry %s: %s", key, e.message)
            return None

    async def _compute_and_store(self, key: str, normalized: str, timeout: float) -> list[float]:
        embedding = await self._embed(normalized, TaskHint.QUERY, timeout)

        # Best effort: the caller still gets the embedding if the write fails
        try:
            await call_with_timeout(
                self._store.upsert_cache_entry(key, normalized, embedding),
                timeout,
                StoreUnavailable,
                "cache upsert",
            )
        except (StoreUnavailable, OperationTimeout) as e:
            logger.warning("Failed to cache embedding for key %s: %s", key, e.message)

        return embedding

    async def _embed(self, normalized: str, task_hint: TaskHint, timeout: float) -> list[float]:
        raw = await call_with_timeout(
            self._provider.embed(normalized, task_hint),
            timeout,
            EmbeddingUnavailable,
            "embedding",
        )
        try:
            return parse_vector(raw, self._dimension)
        except MalformedCacheEntry as e:
            raise EmbeddingUnavailable(f"Provider returned an invalid vector: {e.message}") from e

    def stats(self) -> dict:
        """Get cache counters for this process."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
            "inflight": len(self._inflight),
            "dimension": self._dimension,
        }

    @property
    def dimension(self) -> int:
        """Get the expected embedding dimension."""
        return self._dimension

    @property
    def provider(self) -> VectorProvider:
        """Get the underlying embedding provider (for testing)."""
        return self._provider
