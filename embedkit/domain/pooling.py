# embedkit/domain/pooling.py
from typing import List, Optional

import numpy as np

from embedkit.core.exceptions import VectorDimensionError
from embedkit.domain.models import Vector, PoolingMode


def pool(vectors: List[Vector], mode: PoolingMode = PoolingMode.MEAN) -> Optional[Vector]:
    """
    Combines the chunk vectors of one text into a single vector.

    Returns None for an empty list. A single vector is returned as-is whatever
    the mode. FIRST keeps the leading chunk and ignores the rest.

    Raises:
        VectorDimensionError: If MEAN or MAX pooling is given vectors of different lengths.
    """
    if not vectors:
        return None
    if len(vectors) == 1:
        return vectors[0]

    if mode == PoolingMode.FIRST:
        return vectors[0]
    if mode == PoolingMode.MAX:
        return _pool_max(vectors)
    return _pool_mean(vectors)


def _stack(vectors: List[Vector]) -> np.ndarray:
    dims = len(vectors[0])
    for i, vec in enumerate(vectors):
        if len(vec) != dims:
            raise VectorDimensionError(
                f"Cannot pool vectors of mixed dimensionality: vector 0 has {dims}, vector {i} has {len(vec)}."
            )
    return np.asarray(vectors, dtype=np.float64).reshape(len(vectors), dims)


def _pool_mean(vectors: List[Vector]) -> Vector:
    # float64 accumulation, float32 storage
    return _stack(vectors).mean(axis=0).astype(np.float32).tolist()


def _pool_max(vectors: List[Vector]) -> Vector:
    return _stack(vectors).max(axis=0).astype(np.float32).tolist()
