"""Hybrid relevance ranking.

``HybridRanker`` is the pure, in-process scoring function. ``RemoteRanker``
and ``LocalRanker`` expose the same ``Ranker`` contract over the store-side
function and over ``HybridRanker`` respectively, so a search can use either
and benchmarks can compare them on the same data.
"""

import logging
from collections.abc import Sequence

from prompt_search.config import settings
from prompt_search.entities import PromptRecordEntity, ScoreWeights, SearchResultEntity
from prompt_search.errors import MalformedCacheEntry, StoreUnavailable
from prompt_search.protocols import RecordStore
from prompt_search.scoring import hybrid_score, metadata_signal, order_by_score
from prompt_search.utils import call_with_timeout, cosine_similarity, parse_vector

logger = logging.getLogger(__name__)


class HybridRanker:
    """Fuse cosine similarity with vote/quality metadata into a top-k list.

    Pure computation: no I/O, safe to call from any coroutine.
    """

    def __init__(self, metadata_normalizer: float | None = None) -> None:
        if metadata_normalizer is None:
            metadata_normalizer = settings.metadata_normalizer
        if metadata_normalizer <= 0:
            raise ValueError(f"metadata_normalizer must be positive, got {metadata_normalizer}")
        self._normalizer = metadata_normalizer

    def rank(
        self,
        query_vector: Sequence[float],
        candidates: Sequence[PromptRecordEntity],
        weights: ScoreWeights,
        k: int,
    ) -> list[SearchResultEntity]:
        """Score, sort and truncate candidates.

        Args:
            query_vector: The query embedding
            candidates: Records with embedding, votes and quality score
            weights: Semantic vs metadata weighting (alpha already clamped)
            k: Maximum number of results

        Returns:
            Results ordered by score desc, id asc; empty for no candidates or k <= 0
        """
        if k <= 0 or not candidates:
            return []

        scored = [
            (
                candidate.id,
                hybrid_score(
                    self._semantic(query_vector, candidate),
                    metadata_signal(candidate.votes, candidate.quality_score, self._normalizer),
                    weights.alpha,
                ),
            )
            for candidate in candidates
        ]
        return order_by_score(scored, k)

    def _semantic(self, query_vector: Sequence[float], candidate: PromptRecordEntity) -> float:
        try:
            vector = parse_vector(candidate.embedding, len(query_vector))
        except MalformedCacheEntry as e:
            logger.warning("Scoring prompt %s without semantic signal: %s", candidate.id, e.message)
            return 0.0
        return cosine_similarity(query_vector, vector)

    @property
    def metadata_normalizer(self) -> float:
        return self._normalizer


class RemoteRanker:
    """Delegates ranking to the record store's hybrid search function."""

    mode = "remote"

    def __init__(self, store: RecordStore, timeout: float | None = None) -> None:
        self._store = store
        self._timeout = settings.io_timeout if timeout is None else timeout

    async def rank(
        self,
        query_vector: list[float],
        weights: ScoreWeights,
        k: int,
        timeout: float | None = None,
    ) -> list[SearchResultEntity]:
        if k <= 0:
            return []
        return await call_with_timeout(
            self._store.hybrid_search(query_vector, weights.alpha, k),
            self._timeout if timeout is None else timeout,
            StoreUnavailable,
            "hybrid search",
        )


class LocalRanker:
    """Fetches every candidate and ranks in process.

    Slower than the remote path since all rows cross the wire; kept as a
    fallback and as the reference the remote function is checked against.
    """

    mode = "local"

    def __init__(
        self,
        store: RecordStore,
        ranker: HybridRanker | None = None,
        timeout: float | None = None,
    ) -> None:
        self._store = store
        self._ranker = ranker or HybridRanker()
        self._timeout = settings.io_timeout if timeout is None else timeout
        self.last_candidate_count = 0

    async def rank(
        self,
        query_vector: list[float],
        weights: ScoreWeights,
        k: int,
        timeout: float | None = None,
    ) -> list[SearchResultEntity]:
        if k <= 0:
            return []
        candidates = await call_with_timeout(
            self._store.fetch_candidates(),
            self._timeout if timeout is None else timeout,
            StoreUnavailable,
            "fetch candidates",
        )
        self.last_candidate_count = len(candidates)
        return self._ranker.rank(query_vector, candidates, weights, k)


def create_ranker(
    store: RecordStore,
    mode: str | None = None,
    timeout: float | None = None,
) -> RemoteRanker | LocalRanker:
    """Build the ranker selected by ``mode`` (defaults to settings.ranker_mode)."""
    mode = mode or settings.ranker_mode
    if mode == "remote":
        return RemoteRanker(store, timeout=timeout)
    if mode == "local":
        return LocalRanker(store, timeout=timeout)
    raise ValueError(f"Unknown ranker mode: {mode}")
