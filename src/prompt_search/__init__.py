"""Prompt Search - hybrid semantic search over stored prompts.

This package provides a layered architecture for prompt search:

Layers:
    - protocols: Interface contracts (RecordStore, VectorProvider, Ranker, TextGenerator)
    - repositories: Data access implementations
    - services: Business logic (embedding cache, ranking, search, re-indexing)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from prompt_search.repositories import GeminiEmbeddingProvider, RedisRecordStore
    from prompt_search.services import SearchService

    service = SearchService.create(
        store=RedisRecordStore.create(),
        provider=GeminiEmbeddingProvider.create(),
    )
    results = await service.search("how to write a cover letter")
    ```

For HTTP API:
    ```python
    from prompt_search.api.app import app
    ```
"""

from prompt_search.config import get_redis_client, settings
from prompt_search.entities import (
    CacheEntryEntity,
    PromptRecordEntity,
    PromptSummaryEntity,
    ScoreWeights,
    SearchResultEntity,
)
from prompt_search.errors import (
    EmbeddingUnavailable,
    GenerationUnavailable,
    InvalidInput,
    MalformedCacheEntry,
    NotFound,
    OperationTimeout,
    PromptSearchError,
    SearchFailed,
    StoreUnavailable,
)
from prompt_search.protocols import Ranker, RecordStore, TaskHint, VectorProvider
from prompt_search.services import EmbeddingCache, HybridRanker, SearchService
from prompt_search.text import address_of, normalize

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Text
    "normalize",
    "address_of",
    # Protocols (interfaces)
    "Ranker",
    "RecordStore",
    "TaskHint",
    "VectorProvider",
    # Services (business logic)
    "EmbeddingCache",
    "HybridRanker",
    "SearchService",
    # Entities (domain models)
    "CacheEntryEntity",
    "PromptRecordEntity",
    "PromptSummaryEntity",
    "ScoreWeights",
    "SearchResultEntity",
    # Errors
    "PromptSearchError",
    "InvalidInput",
    "EmbeddingUnavailable",
    "GenerationUnavailable",
    "StoreUnavailable",
    "MalformedCacheEntry",
    "NotFound",
    "OperationTimeout",
    "SearchFailed",
]
