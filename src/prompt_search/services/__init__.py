"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from prompt_search.services import SearchService

    # Using factory method (recommended)
    service = SearchService.create(store=store, provider=provider)
    service = SearchService.create(store=store, provider=provider, ranker_mode="local")
    ```
"""

from .embedding_cache import CachePolicy, EmbeddingCache
from .ranking import HybridRanker, LocalRanker, RemoteRanker, create_ranker
from .reindex import IntervalThrottle, ReindexReport, ReindexService
from .search_service import SearchService

__all__ = [
    "CachePolicy",
    "EmbeddingCache",
    "HybridRanker",
    "IntervalThrottle",
    "LocalRanker",
    "ReindexReport",
    "ReindexService",
    "RemoteRanker",
    "SearchService",
    "create_ranker",
]
