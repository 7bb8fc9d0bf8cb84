"""Prompt record domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PromptRecordEntity:
    """A stored prompt with its document embedding.

    ``id`` is assigned by the record store; records built before insertion
    carry ``id=None``. Content never changes after ingestion, only the
    embedding is replaced when prompts are re-embedded.

    Attributes:
        id: Store-assigned identifier
        content: The prompt text (confidential, never listed)
        category: Free-form category label
        votes: Non-negative vote count
        quality_score: Curated quality signal
        embedding: Document embedding
        created_at: Ingestion time
    """

    content: str
    category: str
    votes: int
    quality_score: float
    embedding: list[float]
    id: int | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def summary(self) -> "PromptSummaryEntity":
        """Project to the listing-safe fields."""
        return PromptSummaryEntity(
            id=self.id,
            category=self.category,
            votes=self.votes,
            quality_score=self.quality_score,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class PromptSummaryEntity:
    """Listing projection of a prompt: no content, no embedding."""

    id: int | None
    category: str
    votes: int
    quality_score: float
    created_at: datetime
