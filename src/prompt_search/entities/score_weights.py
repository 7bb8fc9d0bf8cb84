"""Hybrid score weighting."""

import math
from dataclasses import dataclass

from prompt_search.errors import InvalidInput

DEFAULT_ALPHA = 0.5


@dataclass(frozen=True)
class ScoreWeights:
    """Weighting between semantic (alpha) and metadata (1 - alpha) signal.

    Out-of-range alphas are clamped to [0, 1] rather than rejected.
    """

    alpha: float = DEFAULT_ALPHA

    def __post_init__(self) -> None:
        try:
            alpha = float(self.alpha)
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"alpha must be numeric, got {self.alpha!r}") from e
        if math.isnan(alpha):
            raise InvalidInput("alpha must not be NaN")
        object.__setattr__(self, "alpha", min(1.0, max(0.0, alpha)))
