"""Tests for vector parsing and cosine similarity."""

import math

import numpy as np
import pytest

from prompt_search.errors import MalformedCacheEntry
from prompt_search.utils import cosine_similarity, pack_vector, parse_vector


def test_parse_native_list():
    assert parse_vector([1, 2, 3], 3) == [1.0, 2.0, 3.0]


def test_parse_json_string():
    assert parse_vector("[1, 2.5, 3]", 3) == [1.0, 2.5, 3.0]


def test_parse_numpy_array():
    assert parse_vector(np.array([0.5, 0.25]), 2) == [0.5, 0.25]


def test_parse_packed_float32_bytes():
    assert parse_vector(pack_vector([0.5, -1.0, 2.0]), 3) == [0.5, -1.0, 2.0]


def test_parse_json_bytes():
    assert parse_vector(b"[1, 2]", 2) == [1.0, 2.0]


def test_parse_without_dimension_accepts_any_length():
    assert len(parse_vector("[1,2,3,4,5]")) == 5


def test_length_mismatch_is_malformed():
    with pytest.raises(MalformedCacheEntry):
        parse_vector("[1,2,3]", 768)


@pytest.mark.parametrize(
    "raw",
    [None, "not json", '{"a": 1}', '"[1,2]"', "[[1, 2], [3, 4]]", '["a", "b"]', "[1, NaN]", {"a": 1}],
)
def test_unparseable_values_are_malformed(raw):
    with pytest.raises(MalformedCacheEntry):
        parse_vector(raw)


def test_cosine_of_identical_vectors_is_one():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)


def test_cosine_of_orthogonal_vectors_is_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0


def test_cosine_of_opposite_vectors_is_minus_one():
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_cosine_with_zero_vector_is_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert not math.isnan(cosine_similarity([0.0, 0.0], [0.0, 0.0]))


def test_cosine_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])
