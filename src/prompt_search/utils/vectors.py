"""Vector helpers shared by the cache, the ranker and the repositories."""

import json
import struct
from collections.abc import Sequence
from typing import Any

import numpy as np

from prompt_search.errors import MalformedCacheEntry


def pack_vector(vector: Sequence[float]) -> bytes:
    """Pack a vector as float32 bytes (the Redis vector field format)."""
    return struct.pack(f"{len(vector)}f", *vector)


def parse_vector(raw: Any, dimension: int | None = None) -> list[float]:
    """Parse a stored vector into a list of floats.

    Stores hand vectors back in several encodings: native sequences,
    numpy arrays, JSON strings such as ``"[0.1, 0.2]"`` and packed float32
    bytes. All of them are accepted.

    Args:
        raw: The stored value
        dimension: Expected length; None skips the length check

    Returns:
        The vector as a list of floats

    Raises:
        MalformedCacheEntry: If the value cannot be parsed, contains
            non-finite numbers or has the wrong length
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = _decode_bytes(bytes(raw), dimension)

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedCacheEntry(f"Vector is not valid JSON: {e}") from e

    if isinstance(raw, (str, bytes, dict)) or raw is None:
        raise MalformedCacheEntry(f"Vector has unsupported type {type(raw).__name__}")

    try:
        array = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedCacheEntry(f"Vector is not numeric: {e}") from e

    if array.ndim != 1:
        raise MalformedCacheEntry(f"Vector must be one-dimensional, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise MalformedCacheEntry("Vector contains non-finite values")
    if dimension is not None and array.shape[0] != dimension:
        raise MalformedCacheEntry(f"Vector has length {array.shape[0]}, expected {dimension}")

    return array.tolist()


def _decode_bytes(raw: bytes, dimension: int | None) -> Any:
    """Bytes are either packed float32 or a UTF-8 JSON string."""
    if dimension is not None and len(raw) == dimension * 4:
        return list(struct.unpack(f"{dimension}f", raw))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedCacheEntry(f"Vector bytes are not decodable: {e}") from e


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors have different lengths
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector length mismatch: {va.shape} vs {vb.shape}")

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))
