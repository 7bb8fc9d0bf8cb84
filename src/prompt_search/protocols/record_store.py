"""Record store protocol.

Defines the interface for the persistent store holding both the query
embedding cache and the prompt records, plus the store-side hybrid
ranking function.

Implementations:
- Redis Stack with vector search (default)
- In-memory (tests, offline benchmarking)
"""

from typing import Protocol, runtime_checkable

from prompt_search.entities import (
    CacheEntryEntity,
    PromptRecordEntity,
    PromptSummaryEntity,
    SearchResultEntity,
)


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for the record store.

    Example:
        ```python
        store: RecordStore = RedisRecordStore.create()
        store: RecordStore = InMemoryRecordStore()
        ```
    """

    async def get_cache_entry(self, key: str) -> CacheEntryEntity | None:
        """Look up a cached query embedding.

        The embedding is returned as stored; callers must parse it
        defensively since it may arrive as an encoded string.

        Returns:
            The entry, or None if absent
        """
        ...

    async def upsert_cache_entry(
        self,
        key: str,
        normalized_text: str,
        embedding: list[float],
    ) -> None:
        """Insert or replace a cache entry. Last write wins."""
        ...

    async def insert_record(self, record: PromptRecordEntity) -> int:
        """Persist a new prompt record.

        Returns:
            The store-assigned id
        """
        ...

    async def get_record(self, record_id: int) -> PromptRecordEntity | None:
        """Fetch a full record (including content) by id."""
        ...

    async def list_records(self) -> list[PromptSummaryEntity]:
        """List records newest first, without content or embedding."""
        ...

    async def fetch_candidates(self) -> list[PromptRecordEntity]:
        """Fetch every record with its embedding and metadata for local ranking."""
        ...

    async def update_embedding(self, record_id: int, embedding: list[float]) -> None:
        """Replace the embedding of an existing record.

        Raises:
            NotFound: If no record has this id
        """
        ...

    async def hybrid_search(
        self,
        query_embedding: list[float],
        alpha: float,
        match_count: int,
    ) -> list[SearchResultEntity]:
        """Rank every record on the store side.

        Scores and ordering match ``HybridRanker`` over ``fetch_candidates()``.

        Returns:
            Up to ``match_count`` results, best first
        """
        ...

    async def keyword_search(
        self,
        query_text: str,
        match_count: int,
    ) -> list[SearchResultEntity]:
        """Rank records by query term matches in their content.

        Returns:
            Up to ``match_count`` matching records, best first; records
            matching no term are left out
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...

    async def get_stats(self) -> dict:
        """Get store statistics (implementation-specific)."""
        ...
