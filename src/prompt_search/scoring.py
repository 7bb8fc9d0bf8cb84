"""Hybrid score primitives.

Shared by the in-process ranker and the store-side implementations so
both paths compute identical scores and ordering.
"""

from collections.abc import Iterable

from prompt_search.entities import SearchResultEntity

# Calibrates votes + quality_score to roughly [0, 1]
METADATA_NORMALIZER = 200.0


def metadata_signal(
    votes: float,
    quality_score: float,
    normalizer: float = METADATA_NORMALIZER,
) -> float:
    """Non-semantic relevance: (votes + quality_score) / normalizer."""
    return (votes + quality_score) / normalizer


def hybrid_score(semantic: float, metadata: float, alpha: float) -> float:
    """alpha * semantic + (1 - alpha) * metadata."""
    return alpha * semantic + (1.0 - alpha) * metadata


def order_by_score(scored: Iterable[tuple[int, float]], k: int) -> list[SearchResultEntity]:
    """Sort (id, score) pairs by score desc then id asc, keep the top k.

    Returns:
        Ranked results; empty when k <= 0
    """
    if k <= 0:
        return []
    ordered = sorted(scored, key=lambda item: (-item[1], item[0]))
    return [
        SearchResultEntity(id=record_id, score=score, rank=rank)
        for rank, (record_id, score) in enumerate(ordered[:k])
    ]
