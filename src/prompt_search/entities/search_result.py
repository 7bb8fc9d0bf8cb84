"""Search result domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResultEntity:
    """A single ranked hit.

    Attributes:
        id: Prompt identifier
        score: Hybrid relevance score
        rank: Position in the final list (0 = best)
    """

    id: int
    score: float
    rank: int
