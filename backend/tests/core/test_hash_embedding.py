"""Hash Embedding - determinism, token overlap and degenerate inputs."""

import math

import pytest

from slopguess.core.hash_embedding import (
    XorShift32, fnv1a_32, hash_embedding, normalize_text, tokenize,
)
from slopguess.core.similarity import cosine_similarity


def _norm(v):
    return math.sqrt(sum(x * x for x in v))


def test_fnv1a_known_values():
    assert fnv1a_32("") == 0x811C9DC5
    assert fnv1a_32("a") == 0xE40C292C


def test_xorshift_is_seeded_and_bounded():
    a, b = XorShift32(42), XorShift32(42)
    values = [a.next() for _ in range(50)]
    assert values == [b.next() for _ in range(50)]
    assert all(0.0 <= v <= 1.0 for v in values)


def test_xorshift_zero_seed_does_not_stall():
    rng = XorShift32(0)
    assert rng.next() != 0.0


def test_normalize_and_tokenize():
    assert normalize_text("  A   Red\tDog ") == "a red dog"
    assert tokenize("A red, DOG!") == ["a", "red", "dog"]
    assert tokenize("!!!") == []


def test_same_text_gives_identical_vector():
    assert hash_embedding("a cat on a mat") == hash_embedding("a cat on a mat")


def test_case_and_spacing_do_not_matter():
    assert hash_embedding("A  Cat on a MAT") == hash_embedding("a cat on a mat")


def test_dimensions_and_unit_norm():
    v = hash_embedding("purple dragon", dimensions=64)
    assert len(v) == 64
    assert _norm(v) == pytest.approx(1.0)


def test_shared_tokens_score_higher_than_unrelated():
    base = hash_embedding("a big red dog in the park")
    related = hash_embedding("a big red cat in the park")
    unrelated = hash_embedding("quantum violin sunset")
    assert cosine_similarity(base, related) > cosine_similarity(base, unrelated)


def test_word_order_has_minor_influence():
    a = hash_embedding("dog bites man")
    b = hash_embedding("man bites dog")
    assert a != b
    assert cosine_similarity(a, b) > 0.8


@pytest.mark.parametrize("text", ["", "   ", "?!.,"])
def test_tokenless_text_gives_unit_vector(text):
    v = hash_embedding(text)
    assert len(v) == 128
    assert _norm(v) == pytest.approx(1.0)
    assert v == hash_embedding(text)
