"""In-memory implementation of RecordStore.

Holds cache entries and prompts in dictionaries. Its ``hybrid_search``
runs the same scoring as the in-process ranker, which makes it a drop-in
store for tests and offline benchmarks.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from itertools import count

from prompt_search.entities import (
    CacheEntryEntity,
    PromptRecordEntity,
    PromptSummaryEntity,
    ScoreWeights,
    SearchResultEntity,
)
from prompt_search.errors import NotFound
from prompt_search.scoring import order_by_score
from prompt_search.services.ranking import HybridRanker


class InMemoryRecordStore:
    """Dictionary-backed store.

    This class satisfies the RecordStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, metadata_normalizer: float | None = None) -> None:
        self._ranker = HybridRanker(metadata_normalizer)
        self._cache: dict[str, CacheEntryEntity] = {}
        self._records: dict[int, PromptRecordEntity] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

    async def get_cache_entry(self, key: str) -> CacheEntryEntity | None:
        return self._cache.get(key)

    async def upsert_cache_entry(
        self,
        key: str,
        normalized_text: str,
        embedding: list[float],
    ) -> None:
        self._cache[key] = CacheEntryEntity(
            key=key,
            normalized_text=normalized_text,
            embedding=list(embedding),
            created_at=datetime.now(timezone.utc),
        )

    async def insert_record(self, record: PromptRecordEntity) -> int:
        async with self._lock:
            record_id = next(self._ids)
            self._records[record_id] = replace(record, id=record_id, embedding=list(record.embedding))
        return record_id

    async def get_record(self, record_id: int) -> PromptRecordEntity | None:
        return self._records.get(record_id)

    async def list_records(self) -> list[PromptSummaryEntity]:
        records = sorted(
            self._records.values(),
            key=lambda r: (r.created_at, r.id),
            reverse=True,
        )
        return [record.summary() for record in records]

    async def fetch_candidates(self) -> list[PromptRecordEntity]:
        return list(self._records.values())

    async def update_embedding(self, record_id: int, embedding: list[float]) -> None:
        record = self._records.get(record_id)
        if record is None:
            raise NotFound(f"Prompt {record_id} not found")
        self._records[record_id] = replace(record, embedding=list(embedding))

    async def hybrid_search(
        self,
        query_embedding: list[float],
        alpha: float,
        match_count: int,
    ) -> list[SearchResultEntity]:
        return self._ranker.rank(
            query_embedding,
            list(self._records.values()),
            ScoreWeights(alpha),
            match_count,
        )

    async def keyword_search(
        self,
        query_text: str,
        match_count: int,
    ) -> list[SearchResultEntity]:
        # Score is the number of distinct query terms found in the content
        terms = {term.strip(".,;:!?\"'()") for term in query_text.lower().split()}
        terms.discard("")
        scored = []
        for record in self._records.values():
            content = record.content.lower()
            hits = sum(1 for term in terms if term in content)
            if hits:
                scored.append((record.id, float(hits)))
        return order_by_score(scored, match_count)

    async def health_check(self) -> bool:
        return True

    async def get_stats(self) -> dict:
        return {
            "backend": "memory",
            "total_prompts": len(self._records),
            "cached_embeddings": len(self._cache),
        }

    def put_raw_cache_entry(self, key: str, normalized_text: str, embedding: object) -> None:
        """Store an arbitrary (possibly malformed) embedding value under a key."""
        self._cache[key] = CacheEntryEntity(
            key=key,
            normalized_text=normalized_text,
            embedding=embedding,  # type: ignore[arg-type]
            created_at=datetime.now(timezone.utc),
        )
