"""Ranker protocol.

The same ranking contract is served by the store-side function (remote)
and by the in-process hybrid ranker (local), so either can back a search
and both can be compared on identical fixtures.
"""

from typing import Protocol, runtime_checkable

from prompt_search.entities import ScoreWeights, SearchResultEntity


@runtime_checkable
class Ranker(Protocol):
    """Protocol for ranking stored prompts against a query vector."""

    @property
    def mode(self) -> str:
        """Return the ranker identifier ("remote" or "local")."""
        ...

    async def rank(
        self,
        query_vector: list[float],
        weights: ScoreWeights,
        k: int,
        timeout: float | None = None,
    ) -> list[SearchResultEntity]:
        """Return at most ``k`` results, best first."""
        ...
