"""Query text canonicalization and content addressing.

Two inputs that differ only in case or surrounding whitespace normalize to
the same string, and therefore to the same cache key and embedding.
"""

import hashlib

from prompt_search.errors import InvalidInput


def normalize(text: str) -> str:
    """Trim surrounding whitespace and lowercase.

    Args:
        text: Raw query or document text

    Returns:
        The normalized text

    Raises:
        InvalidInput: If the text is not a string or is empty after trimming
    """
    if not isinstance(text, str):
        raise InvalidInput("Text must be a string")

    normalized = text.strip().lower()
    if not normalized:
        raise InvalidInput("Text must not be empty")
    return normalized


def address_of(normalized_text: str) -> str:
    """Derive the fixed-length cache key for normalized text.

    MD5 is used for deduplication only, never for integrity.

    Returns:
        32-character lowercase hex digest
    """
    return hashlib.md5(normalized_text.encode("utf-8"), usedforsecurity=False).hexdigest()
