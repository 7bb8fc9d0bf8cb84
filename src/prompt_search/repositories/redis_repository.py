"""Redis implementation of RecordStore.

Prompts live in Redis hashes indexed by a Redis Stack vector index
(HNSW, COSINE). Query cache entries are plain hashes under a separate
key prefix, so they never show up in prompt searches.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError
from redisvl.index import AsyncSearchIndex
from redisvl.query import TextQuery, VectorQuery

from prompt_search.config import get_redis_client, settings
from prompt_search.entities import (
    CacheEntryEntity,
    PromptRecordEntity,
    PromptSummaryEntity,
    ScoreWeights,
    SearchResultEntity,
)
from prompt_search.errors import MalformedCacheEntry, NotFound
from prompt_search.scoring import hybrid_score, metadata_signal, order_by_score
from prompt_search.utils import pack_vector, parse_vector

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ("record_id", "category", "votes", "quality_score", "created_at")


def _decode(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _timestamp(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(float(_decode(value, "0")), tz=timezone.utc)
    except ValueError:
        return datetime.fromtimestamp(0, tz=timezone.utc)


class RedisRecordStore:
    """Redis implementation using an HNSW vector index.

    This class satisfies the RecordStore protocol through structural
    typing - no explicit inheritance needed.

    Key layout (``prefix`` defaults to settings.index_prefix):
    - ``{prefix}:cache:{key}``   query cache entries
    - ``{prefix}:prompt:{id}``   prompt records (indexed)
    - ``{prefix}:prompt_seq``    id counter

    ``hybrid_search`` runs a KNN query on the server whose window spans the
    whole index, then fuses metadata, so its ranking matches the local
    ranker over ``fetch_candidates()``. ``keyword_search`` is a full-text
    query on ``content``.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        dimension: int | None = None,
        metadata_normalizer: float | None = None,
        index: AsyncSearchIndex | None = None,
    ) -> None:
        """Initialize the Redis record store.

        Args:
            redis_client: asyncio Redis client. If None, creates default.
            prefix: Key prefix and index name stem. Defaults to settings.
            dimension: Embedding dimension. Defaults to settings.
            metadata_normalizer: Metadata scale. Defaults to settings.
            index: Search index over the prompt hashes. If None, builds the
                redisvl index from the schema.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.index_prefix
        self._dimension = settings.embedding_dimension if dimension is None else dimension
        self._normalizer = settings.metadata_normalizer if metadata_normalizer is None else metadata_normalizer
        self._index_name = f"{self._prefix}_prompts"
        if index is None:
            index = AsyncSearchIndex.from_dict(self._schema(), redis_client=self._client)
        self._index = index
        self._index_ready = False

    @classmethod
    def create(
        cls,
        prefix: str | None = None,
        dimension: int | None = None,
    ) -> "RedisRecordStore":
        """Factory method to create RedisRecordStore with defaults.

        Args:
            prefix: Key prefix. If None, uses settings.
            dimension: Vector dimension. If None, uses settings.

        Returns:
            Configured RedisRecordStore
        """
        return cls(prefix=prefix, dimension=dimension)

    def _schema(self) -> dict:
        return {
            "index": {
                "name": self._index_name,
                "prefix": f"{self._prefix}:prompt",
                "storage_type": "hash",
            },
            "fields": [
                {"name": "record_id", "type": "numeric"},
                {"name": "content", "type": "text"},
                {"name": "category", "type": "tag"},
                {"name": "votes", "type": "numeric"},
                {"name": "quality_score", "type": "numeric"},
                {"name": "created_at", "type": "numeric", "attrs": {"sortable": True}},
                {
                    "name": "embedding",
                    "type": "vector",
                    "attrs": {
                        "dims": self._dimension,
                        "algorithm": "hnsw",
                        "distance_metric": "cosine",
                        "datatype": "float32",
                    },
                },
            ],
        }

    async def _ensure_index(self) -> None:
        """Ensure the Redis vector index exists."""
        if self._index_ready:
            return
        if await self._index.exists():
            logger.info("Using existing index: %s", self._index_name)
        else:
            await self._index.create(overwrite=False)
            logger.info("Created new index: %s", self._index_name)
        self._index_ready = True

    def _cache_key(self, key: str) -> str:
        return f"{self._prefix}:cache:{key}"

    def _prompt_key(self, record_id: int) -> str:
        return f"{self._prefix}:prompt:{record_id}"

    async def _prompt_keys(self) -> list[bytes]:
        return [key async for key in self._client.scan_iter(match=f"{self._prefix}:prompt:*")]

    async def get_cache_entry(self, key: str) -> CacheEntryEntity | None:
        data = await self._client.hgetall(self._cache_key(key))
        if not data:
            return None
        return CacheEntryEntity(
            key=key,
            normalized_text=_decode(data.get(b"normalized_text")),
            # Parsed (and validated) by the embedding cache
            embedding=data.get(b"embedding"),
            created_at=_timestamp(data.get(b"created_at")),
        )

    async def upsert_cache_entry(
        self,
        key: str,
        normalized_text: str,
        embedding: list[float],
    ) -> None:
        await self._client.hset(
            self._cache_key(key),
            mapping={
                "normalized_text": normalized_text,
                "embedding": pack_vector(embedding),
                "created_at": str(time.time()),
            },
        )

    async def insert_record(self, record: PromptRecordEntity) -> int:
        await self._ensure_index()
        record_id = int(await self._client.incr(f"{self._prefix}:prompt_seq"))
        await self._client.hset(
            self._prompt_key(record_id),
            mapping={
                "record_id": record_id,
                "content": record.content,
                "category": record.category,
                "votes": record.votes,
                "quality_score": record.quality_score,
                "embedding": pack_vector(record.embedding),
                "created_at": str(record.created_at.timestamp()),
            },
        )
        return record_id

    async def get_record(self, record_id: int) -> PromptRecordEntity | None:
        data = await self._client.hgetall(self._prompt_key(record_id))
        if not data:
            return None
        return self._to_record(data)

    async def list_records(self) -> list[PromptSummaryEntity]:
        keys = await self._prompt_keys()
        pipe = self._client.pipeline()
        for key in keys:
            pipe.hmget(key, list(SUMMARY_FIELDS))
        rows = await pipe.execute()

        summaries = [
            PromptSummaryEntity(
                id=int(_decode(record_id, "0")),
                category=_decode(category),
                votes=int(float(_decode(votes, "0"))),
                quality_score=float(_decode(quality, "0")),
                created_at=_timestamp(created_at),
            )
            for record_id, category, votes, quality, created_at in rows
        ]
        summaries.sort(key=lambda s: (s.created_at, s.id), reverse=True)
        return summaries

    async def fetch_candidates(self) -> list[PromptRecordEntity]:
        keys = await self._prompt_keys()
        pipe = self._client.pipeline()
        for key in keys:
            pipe.hgetall(key)
        rows = await pipe.execute()
        return [self._to_record(data) for data in rows if data]

    async def update_embedding(self, record_id: int, embedding: list[float]) -> None:
        key = self._prompt_key(record_id)
        if not await self._client.exists(key):
            raise NotFound(f"Prompt {record_id} not found")
        await self._client.hset(key, "embedding", pack_vector(embedding))

    async def hybrid_search(
        self,
        query_embedding: list[float],
        alpha: float,
        match_count: int,
    ) -> list[SearchResultEntity]:
        if match_count <= 0:
            return []
        await self._ensure_index()
        alpha = ScoreWeights(alpha).alpha

        # KNN over the full index: metadata can lift any prompt into the top k
        info = await self._index.info()
        window = max(match_count, int(_decode(info.get("num_docs"), "0")))

        query = VectorQuery(
            vector=query_embedding,
            vector_field_name="embedding",
            return_fields=["record_id", "votes", "quality_score"],
            num_results=window,
        )
        results = await self._index.query(query)

        scored = []
        for result in results:
            # COSINE distance is 1 - similarity
            semantic = 1.0 - float(_decode(result.get("vector_distance"), "1"))
            metadata = metadata_signal(
                float(_decode(result.get("votes"), "0")),
                float(_decode(result.get("quality_score"), "0")),
                self._normalizer,
            )
            scored.append((int(_decode(result.get("record_id"), "0")), hybrid_score(semantic, metadata, alpha)))

        return order_by_score(scored, match_count)

    async def keyword_search(
        self,
        query_text: str,
        match_count: int,
    ) -> list[SearchResultEntity]:
        if match_count <= 0 or not query_text.strip():
            return []
        await self._ensure_index()

        query = TextQuery(
            text=query_text,
            text_field_name="content",
            return_fields=["record_id"],
            num_results=match_count,
            stopwords=None,
        )
        results = await self._index.query(query)

        scored = [
            (int(_decode(result.get("record_id"), "0")), float(_decode(result.get("score"), "0")))
            for result in results
        ]
        return order_by_score(scored, match_count)

    def _to_record(self, data: dict) -> PromptRecordEntity:
        record_id = int(_decode(data.get(b"record_id"), "0"))
        try:
            embedding = parse_vector(data.get(b"embedding"), self._dimension)
        except MalformedCacheEntry as e:
            logger.warning("Prompt %s has an unreadable embedding: %s", record_id, e.message)
            embedding = []

        return PromptRecordEntity(
            id=record_id,
            content=_decode(data.get(b"content")),
            category=_decode(data.get(b"category")),
            votes=int(float(_decode(data.get(b"votes"), "0"))),
            quality_score=float(_decode(data.get(b"quality_score"), "0")),
            embedding=embedding,
            created_at=_timestamp(data.get(b"created_at")),
        )

    async def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    async def get_stats(self) -> dict:
        cache_keys = [key async for key in self._client.scan_iter(match=f"{self._prefix}:cache:*")]
        return {
            "backend": "redis",
            "index_name": self._index_name,
            "total_prompts": len(await self._prompt_keys()),
            "cached_embeddings": len(cache_keys),
        }

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
