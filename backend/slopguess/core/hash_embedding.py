"""Hash Embedding - deterministic bag-of-tokens vectors for offline mode and tests.

Invariants:
    - Same text -> bit-identical vector (FNV-1a seeds, xorshift32 stream, no global RNG)
    - Texts sharing tokens score higher than unrelated texts under cosine similarity
    - Output has unit L2 norm; a zero sum falls back to a seeded random unit vector

Design Decisions:
    - Each token scatters into TOKEN_SPREAD of the dimensions with signed weights
    - A 0.1-weight perturbation seeded from the whole normalized text gives word order
      a minor influence
"""

import re

import numpy as np

from slopguess.core.similarity import normalize_vector

DEFAULT_DIMENSIONS = 128
TOKEN_SPREAD = 16
ORDER_WEIGHT = 0.1

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_UINT32 = 0xFFFFFFFF

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a over the code points of text."""
    h = _FNV_OFFSET
    for ch in text:
        h ^= ord(ch)
        h = (h * _FNV_PRIME) & _UINT32
    return h


class XorShift32:
    """Small seeded PRNG yielding floats in [0, 1]."""

    def __init__(self, seed: int):
        self._state = (seed & _UINT32) or 1

    def next(self) -> float:
        x = self._state
        x ^= (x << 13) & _UINT32
        x ^= x >> 17
        x ^= (x << 5) & _UINT32
        self._state = x
        return x / _UINT32

    def signed(self) -> float:
        return self.next() * 2 - 1


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text.lower().strip())


def tokenize(text: str) -> list[str]:
    stripped = _NON_ALNUM.sub("", normalize_text(text))
    return [t for t in stripped.split(" ") if t]


def _random_unit(seed_text: str, dimensions: int) -> np.ndarray:
    rng = XorShift32(fnv1a_32(seed_text))
    raw = np.array([rng.signed() for _ in range(dimensions)], dtype=np.float64)
    return normalize_vector(raw) if np.any(raw) else np.eye(1, dimensions)[0]


def hash_embedding(text: str, dimensions: int = DEFAULT_DIMENSIONS) -> list[float]:
    """Deterministic unit vector for text."""
    normalized = normalize_text(text)
    tokens = tokenize(text)

    if not tokens:
        return _random_unit(normalized or "empty", dimensions).tolist()

    vector = np.zeros(dimensions, dtype=np.float64)
    for token in tokens:
        rng = XorShift32(fnv1a_32(token))
        for _ in range(TOKEN_SPREAD):
            dim = int(rng.next() * dimensions) % dimensions
            vector[dim] += rng.signed()

    order_rng = XorShift32(fnv1a_32(normalized))
    vector += ORDER_WEIGHT * np.array(
        [order_rng.signed() for _ in range(dimensions)], dtype=np.float64,
    )

    unit = normalize_vector(vector)
    if unit is None:
        unit = _random_unit(f"fallback_{normalized}", dimensions)
    return unit.tolist()
