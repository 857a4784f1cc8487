# embedkit/domain/vector.py
"""
Vector algebra over embedding vectors.

Vectors are stored as float32-representable Python floats. Every reduction
(norm, dot product, distance) is accumulated in float64 so the rounding error
does not grow with dimensionality. Dimension mismatches return sentinel values
instead of raising; callers that need a hard failure must compare lengths
themselves.
"""
import sys
from typing import Iterable

import numpy as np

from embedkit.domain.models import Vector, SimilarityMetric

MAX_DISTANCE = sys.float_info.max


def to_vector(values: Iterable[float]) -> Vector:
    """Rounds raw backend floats to the stored float32 precision."""
    return np.asarray(list(values), dtype=np.float32).tolist()


def _as_f64(v: Vector) -> np.ndarray:
    return np.asarray(v, dtype=np.float64)


def norm(v: Vector) -> float:
    """L2 norm (magnitude) of the vector."""
    a = _as_f64(v)
    return float(np.sqrt(np.dot(a, a)))


def normalize(v: Vector) -> Vector:
    """Returns a unit vector. The zero vector is returned unchanged."""
    n = norm(v)
    if n == 0:
        return v
    return (_as_f64(v) / n).astype(np.float32).tolist()


def dot(v: Vector, w: Vector) -> float:
    if len(v) != len(w):
        return 0.0
    return float(np.dot(_as_f64(v), _as_f64(w)))


def cosine_similarity(v: Vector, w: Vector) -> float:
    """Cosine of the angle between two vectors, in [-1, 1]."""
    if len(v) != len(w):
        return 0.0
    norm_v = norm(v)
    norm_w = norm(w)
    if norm_v == 0 or norm_w == 0:
        return 0.0
    return dot(v, w) / (norm_v * norm_w)


def euclidean_distance(v: Vector, w: Vector) -> float:
    if len(v) != len(w):
        return MAX_DISTANCE
    diff = _as_f64(v) - _as_f64(w)
    return float(np.sqrt(np.dot(diff, diff)))


def similarity(v: Vector, w: Vector, metric: SimilarityMetric = SimilarityMetric.COSINE) -> float:
    """
    Similarity score under the given metric.

    Euclidean distance is mapped to ``1 / (1 + distance)`` so identical vectors
    score 1 and larger distances approach 0.
    """
    if metric == SimilarityMetric.DOT:
        return dot(v, w)
    if metric == SimilarityMetric.EUCLIDEAN:
        return 1.0 / (1.0 + euclidean_distance(v, w))
    return cosine_similarity(v, w)
