"""Search service for core business logic.

This service orchestrates search and ingestion by coordinating the
embedding cache, the configured ranker and the record store.
"""

import logging
import math
from dataclasses import replace

from prompt_search.config import settings
from prompt_search.entities import (
    PromptRecordEntity,
    PromptSummaryEntity,
    ScoreWeights,
    SearchResultEntity,
)
from prompt_search.errors import (
    GenerationUnavailable,
    InvalidInput,
    NotFound,
    PromptSearchError,
    SearchFailed,
    StoreUnavailable,
)
from prompt_search.protocols import Ranker, RecordStore, TextGenerator, VectorProvider
from prompt_search.utils import call_with_timeout

from .embedding_cache import CachePolicy, EmbeddingCache
from .ranking import create_ranker

logger = logging.getLogger(__name__)


class SearchService:
    """Core search orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - RecordStore: Redis, in-memory, etc.
    - VectorProvider (through EmbeddingCache): Gemini, Ollama, local
    - Ranker: remote (store-side) or local (in-process)

    Callers cannot observe which ranker ran except through latency.

    Example:
        ```python
        service = SearchService.create(
            store=RedisRecordStore.create(),
            provider=GeminiEmbeddingProvider.create(),
        )
        results = await service.search("python optimization", ScoreWeights(0.7))
        ```
    """

    def __init__(
        self,
        store: RecordStore,
        embedding_cache: EmbeddingCache,
        ranker: Ranker,
        generator: TextGenerator | None = None,
        default_k: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the search service.

        Args:
            store: Record store (required).
            embedding_cache: Embedding cache over the provider (required).
            ranker: Remote or local ranker (required).
            generator: Text generation service used by ``execute``.
            default_k: Result count when none is given. Defaults to settings.
            timeout: Per-call timeout in seconds. Defaults to settings.
        """
        self._store = store
        self._cache = embedding_cache
        self._ranker = ranker
        self._generator = generator
        self._default_k = settings.default_match_count if default_k is None else default_k
        self._timeout = settings.io_timeout if timeout is None else timeout

    @classmethod
    def create(
        cls,
        store: RecordStore,
        provider: VectorProvider,
        ranker_mode: str | None = None,
        generator: TextGenerator | None = None,
        timeout: float | None = None,
    ) -> "SearchService":
        """Factory method wiring the cache and ranker around a store and provider.

        Args:
            store: Record store (required).
            provider: Embedding provider (required).
            ranker_mode: "remote" or "local". If None, uses settings.
            generator: Optional text generation service.
            timeout: Per-call timeout. If None, uses settings.

        Returns:
            Configured SearchService instance
        """
        return cls(
            store=store,
            embedding_cache=EmbeddingCache(
                store=store,
                provider=provider,
                dimension=provider.dimension,
                timeout=timeout,
            ),
            ranker=create_ranker(store, mode=ranker_mode, timeout=timeout),
            generator=generator,
            timeout=timeout,
        )

    async def search(
        self,
        query_text: str,
        weights: ScoreWeights | None = None,
        k: int | None = None,
        timeout: float | None = None,
    ) -> list[SearchResultEntity]:
        """Find the prompts most relevant to a query.

        Business logic:
        1. Reject blank queries
        2. Resolve the query embedding through the cache
        3. Rank with the configured ranker

        Args:
            query_text: The search query
            weights: Semantic vs metadata weighting. Defaults to alpha=0.5
            k: Maximum number of results. Defaults to settings
            timeout: Override the per-call timeout

        Returns:
            Ranked results, best first

        Raises:
            InvalidInput: If the query is blank
            SearchFailed: If embedding or ranking fails (root cause chained)
        """
        if not isinstance(query_text, str) or not query_text.strip():
            raise InvalidInput("Query text is required")

        weights = weights or ScoreWeights()
        k = self._default_k if k is None else k

        try:
            vector, was_hit = await self._cache.resolve(query_text, CachePolicy.QUERY, timeout)
            results = await self._ranker.rank(vector, weights, k, timeout)
        except InvalidInput:
            raise
        except PromptSearchError as e:
            logger.warning("Search failed (%s): %s", e.code, e.message)
            raise SearchFailed(f"Search failed: {e.message}", e) from e
        except Exception as e:
            logger.exception("Unexpected search failure")
            raise SearchFailed(f"Search failed: {e}", e) from e

        logger.debug(
            "Search via %s ranker returned %d results (cache %s)",
            self._ranker.mode,
            len(results),
            "hit" if was_hit else "miss",
        )
        return results

    async def keyword_search(
        self,
        query_text: str,
        k: int | None = None,
        timeout: float | None = None,
    ) -> list[SearchResultEntity]:
        """Lexical baseline: rank prompts by query term matches in their content.

        No embedding is resolved, so the query cache is untouched.

        Raises:
            InvalidInput: If the query is blank
            SearchFailed: If the store fails (root cause chained)
        """
        if not isinstance(query_text, str) or not query_text.strip():
            raise InvalidInput("Query text is required")

        k = self._default_k if k is None else k
        if k <= 0:
            return []

        try:
            return await call_with_timeout(
                self._store.keyword_search(query_text, k),
                self._timeout if timeout is None else timeout,
                StoreUnavailable,
                "keyword search",
            )
        except PromptSearchError as e:
            logger.warning("Keyword search failed (%s): %s", e.code, e.message)
            raise SearchFailed(f"Keyword search failed: {e.message}", e) from e

    async def ingest(
        self,
        content: str,
        category: str = "",
        votes: int = 0,
        quality_score: float = 0.0,
        timeout: float | None = None,
    ) -> PromptRecordEntity:
        """Embed and store a new prompt.

        The document embedding is never written to the query cache.

        Args:
            content: The prompt text, stored exactly as given
            category: Category label
            votes: Non-negative vote count
            quality_score: Quality signal
            timeout: Override the per-call timeout

        Returns:
            The stored record with its assigned id

        Raises:
            InvalidInput: If content is blank, votes negative or quality non-numeric
        """
        if not isinstance(content, str) or not content.strip():
            raise InvalidInput("Prompt content is required")
        if isinstance(votes, bool) or not isinstance(votes, int) or votes < 0:
            raise InvalidInput("votes must be a non-negative integer")
        if isinstance(quality_score, bool) or not isinstance(quality_score, (int, float)):
            raise InvalidInput("quality_score must be numeric")
        if not math.isfinite(quality_score):
            raise InvalidInput("quality_score must be finite")

        timeout = self._timeout if timeout is None else timeout
        embedding, _ = await self._cache.resolve(content, CachePolicy.DOCUMENT, timeout)

        record = PromptRecordEntity(
            content=content,
            category=category,
            votes=votes,
            quality_score=float(quality_score),
            embedding=embedding,
        )
        record_id = await call_with_timeout(
            self._store.insert_record(record),
            timeout,
            StoreUnavailable,
            "insert prompt",
        )
        logger.info("Ingested prompt %s (category=%r)", record_id, category)
        return replace(record, id=record_id)

    async def get_prompt(self, record_id: int) -> PromptRecordEntity:
        """Fetch a prompt including its content.

        Raises:
            NotFound: If no prompt has this id
        """
        record = await call_with_timeout(
            self._store.get_record(record_id),
            self._timeout,
            StoreUnavailable,
            "get prompt",
        )
        if record is None:
            raise NotFound(f"Prompt {record_id} not found")
        return record

    async def list_prompts(self) -> list[PromptSummaryEntity]:
        """List prompts newest first, without content or embeddings."""
        return await call_with_timeout(
            self._store.list_records(),
            self._timeout,
            StoreUnavailable,
            "list prompts",
        )

    async def execute(self, record_id: int, user_input: str) -> str:
        """Run a stored prompt against caller input.

        The stored content and the input are joined and forwarded to the
        text generator; the content itself is never returned.

        Raises:
            InvalidInput: If the input is blank
            NotFound: If no prompt has this id
            GenerationUnavailable: If no generator is configured or it fails
        """
        if not isinstance(user_input, str) or not user_input.strip():
            raise InvalidInput("Input is required")
        if self._generator is None:
            raise GenerationUnavailable("No text generator configured")

        record = await self.get_prompt(record_id)
        return await call_with_timeout(
            self._generator.generate(f"{record.content}\n\n{user_input}"),
            self._timeout,
            GenerationUnavailable,
            "text generation",
        )

    async def get_stats(self) -> dict:
        """Get store, cache and ranker statistics."""
        stats = await call_with_timeout(
            self._store.get_stats(),
            self._timeout,
            StoreUnavailable,
            "store stats",
        )
        stats["ranker_mode"] = self._ranker.mode
        stats["embedding_model"] = self._cache.provider.model_name
        stats["cache"] = self._cache.stats()
        return stats

    async def is_healthy(self) -> bool:
        """Check if both store and embeddings are healthy."""
        store_healthy = await self._store.health_check()
        embeddings_healthy = await self._cache.provider.is_available()
        return store_healthy and embeddings_healthy

    @property
    def ranker(self) -> Ranker:
        """Get the configured ranker."""
        return self._ranker

    @property
    def embedding_cache(self) -> EmbeddingCache:
        """Get the embedding cache (for testing)."""
        return self._cache

    @property
    def store(self) -> RecordStore:
        """Get the underlying record store (for testing)."""
        return self._store
