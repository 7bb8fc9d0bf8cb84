"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .prompt_record import PromptRecordEntity, PromptSummaryEntity
from .score_weights import DEFAULT_ALPHA, ScoreWeights
from .search_result import SearchResultEntity

__all__ = [
    "CacheEntryEntity",
    "PromptRecordEntity",
    "PromptSummaryEntity",
    "ScoreWeights",
    "DEFAULT_ALPHA",
    "SearchResultEntity",
]
