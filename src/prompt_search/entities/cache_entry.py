"""Cache entry domain entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached query embedding.

    Attributes:
        key: Content address of the normalized text
        normalized_text: The normalized query text
        embedding: The query embedding (length must equal the configured dimension)
        created_at: When this entry was written
    """

    key: str
    normalized_text: str
    embedding: list[float]
    created_at: datetime
