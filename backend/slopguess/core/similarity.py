"""Cosine Similarity - pure vector comparison used by scoring and element matching.

Invariants:
    - Empty input raises EmptyVectorError, length mismatch raises DimensionMismatchError
    - Zero-magnitude input returns exactly 0.0 (degenerate, not an error)
    - Result is clamped to [-1, 1] so float noise never escapes the bounds
"""

from typing import Sequence

import numpy as np

from slopguess.core.errors import DimensionMismatchError, EmptyVectorError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two equal-length vectors."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.size == 0 or vb.size == 0:
        raise EmptyVectorError()
    if va.shape != vb.shape:
        raise DimensionMismatchError(va.size, vb.size)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    value = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, value))


def normalize_vector(vector: np.ndarray) -> np.ndarray | None:
    """Scale to unit length; None when the vector has no magnitude."""
    magnitude = np.linalg.norm(vector)
    if magnitude == 0.0:
        return None
    return vector / magnitude
