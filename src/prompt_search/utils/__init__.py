"""Utility modules for prompt search."""

from .timeouts import call_with_timeout
from .vectors import cosine_similarity, pack_vector, parse_vector

__all__ = [
    "call_with_timeout",
    "cosine_similarity",
    "pack_vector",
    "parse_vector",
]
