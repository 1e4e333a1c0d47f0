"""Vector primitives for cosine scoring.

Embeddings are float32 numpy arrays. Every embedding stored by the registry
and the context cache is unit-length, so cosine similarity reduces to a dot
product, and scoring a whole catalog is one matrix-vector product.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .errors import DimensionMismatchError

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vector(vector: VectorLike) -> np.ndarray:
    """View ``vector`` as a float32 array, copying only when needed."""
    return np.asarray(vector, dtype=np.float32)


def magnitude(vector: VectorLike) -> float:
    """Euclidean length of a vector."""
    return float(np.linalg.norm(vector))


def normalize(vector: VectorLike, in_place: bool = False) -> np.ndarray:
    """Scale a vector to unit length.

    The zero vector has no direction and is returned unchanged.

    Args:
        vector: Vector to normalize.
        in_place: Divide the float32 array ``vector`` itself instead of
            allocating a new one. Any other reference to the same buffer sees
            the change. Inputs that are not float32 arrays are converted first.

    Returns:
        The unit-length vector (the same object when ``in_place`` is set on a
        float32 array).
    """
    arr = as_vector(vector) if in_place else np.array(vector, dtype=np.float32)
    mag = np.linalg.norm(arr)
    if mag == 0:
        return arr

    arr /= mag
    return arr


def similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine similarity of two unit-length vectors (their dot product).

    Inputs are not re-normalized.

    Raises:
        DimensionMismatchError: If the vectors have different lengths.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    return float(np.dot(a, b))


def similarities(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Dot product of ``vector`` with every row of ``matrix``.

    Raises:
        DimensionMismatchError: If ``vector`` does not match the row length.
    """
    if matrix.shape[1] != len(vector):
        raise DimensionMismatchError(matrix.shape[1], len(vector))
    return matrix @ vector
