"""
Dense matrix primitives used by the QR and eigen routines.

Matrices are 2-D float64 numpy arrays and vectors are 1-D float64 arrays.
Every function returns a freshly allocated result; inputs are never modified.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from .errors import DecompositionError, NullInputError, ShapeMismatchError


def as_matrix(data: Any, name: str = "matrix") -> np.ndarray:
    """Coerce ``data`` to a rectangular float64 matrix (copying it)."""
    if data is None:
        raise NullInputError(f"{name} is required, got None")
    try:
        matrix = np.array(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ShapeMismatchError(f"{name} is not a rectangular numeric matrix: {exc}") from exc
    if matrix.ndim != 2:
        raise ShapeMismatchError(f"{name} must be 2-D, got shape {matrix.shape}")
    return matrix


def as_vector(data: Any, name: str = "vector") -> np.ndarray:
    """Coerce ``data`` to a 1-D float64 vector (copying it)."""
    if data is None:
        raise NullInputError(f"{name} is required, got None")
    try:
        vector = np.array(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ShapeMismatchError(f"{name} is not a numeric vector: {exc}") from exc
    if vector.ndim != 1:
        raise ShapeMismatchError(f"{name} must be 1-D, got shape {vector.shape}")
    return vector


def zeros(rows: int, cols: int) -> np.ndarray:
    if rows < 1 or cols < 1:
        raise ShapeMismatchError(f"Cannot allocate a {rows}x{cols} matrix")
    return np.zeros((rows, cols), dtype=np.float64)


def identity(n: int) -> np.ndarray:
    if n < 1:
        raise ShapeMismatchError(f"Cannot allocate a {n}x{n} identity")
    return np.eye(n, dtype=np.float64)


def transpose(a: Any) -> np.ndarray:
    a = as_matrix(a)
    return np.ascontiguousarray(a.T)


def column(a: Any, index: int) -> np.ndarray:
    a = as_matrix(a)
    if not 0 <= index < a.shape[1]:
        raise ShapeMismatchError(f"Column {index} out of range for shape {a.shape}")
    return a[:, index].copy()


def require_square(a: Any, name: str = "matrix") -> np.ndarray:
    """Return ``a`` as a matrix, failing fast if it is not square."""
    a = as_matrix(a, name)
    rows, cols = a.shape
    if rows != cols:
        raise ShapeMismatchError(f"{name} must be square, got {rows}x{cols}")
    return a


def dot(u: Any, v: Any) -> float:
    """Inner product accumulated with ``math.fsum``."""
    u = as_vector(u, "u")
    v = as_vector(v, "v")
    if u.shape != v.shape:
        raise ShapeMismatchError(f"Cannot take dot product of lengths {u.size} and {v.size}")
    return math.fsum(u * v)


def multiply(a: Any, b: Any) -> np.ndarray:
    """
    Standard matrix product ``a @ b``.

    Raises:
        ShapeMismatchError: if the inner dimensions disagree.
    """
    a = as_matrix(a, "left operand")
    b = as_matrix(b, "right operand")
    rows_a, cols_a = a.shape
    rows_b, cols_b = b.shape
    if cols_a != rows_b:
        raise ShapeMismatchError(
            f"Cannot multiply {rows_a}x{cols_a} by {rows_b}x{cols_b}: inner dimensions differ"
        )

    result = np.zeros((rows_a, cols_b), dtype=np.float64)
    for i in range(rows_a):
        for j in range(cols_b):
            result[i, j] = np.dot(a[i, :], b[:, j])
    return result


def column_norm(v: Any) -> float:
    """Euclidean norm of ``v``; squares are summed with extended precision."""
    v = as_vector(v)
    return math.sqrt(math.fsum(v * v))


def project(onto: Any, of: Any) -> np.ndarray:
    """
    Orthogonal projection of ``of`` onto ``onto``.

    Raises:
        DecompositionError: if ``onto`` is the zero vector.
    """
    onto = as_vector(onto, "onto")
    of = as_vector(of, "of")
    denominator = dot(onto, onto)
    if denominator == 0.0:
        raise DecompositionError("Cannot project onto the zero vector")
    return (dot(onto, of) / denominator) * onto
