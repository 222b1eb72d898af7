"""
QR decomposition by modified Gram-Schmidt orthogonalisation.
"""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from .constants import QR_RANK_TOLERANCE
from .errors import DecompositionError
from .linalg import column, column_norm, multiply, project, require_square, transpose, zeros


def qr_decompose(a: Any, rank_tolerance: float = QR_RANK_TOLERANCE) -> Tuple[np.ndarray, np.ndarray]:
    """
    Factor a square matrix into ``Q`` (orthonormal columns) and ``R`` (upper
    triangular) so that ``A = QR``.

    Each column of ``A`` has its projection onto every earlier column of ``Q``
    removed, one column at a time (the running remainder is projected, which
    is what makes this the modified variant), and is then normalised.
    ``R`` is recovered as ``Qᵀ A``.

    Args:
        a: square matrix
        rank_tolerance: remainder norm, relative to the column's own norm,
            below which the column is considered linearly dependent

    Returns:
        tuple: (Q, R)

    Raises:
        ShapeMismatchError: if ``a`` is not square.
        DecompositionError: if a column reduces to zero (rank-deficient input).
    """
    a = require_square(a, "QR input")
    n = a.shape[0]
    q = zeros(n, n)

    for i in range(n):
        original = column(a, i)
        remainder = original.copy()
        for j in range(i):
            remainder = remainder - project(q[:, j], remainder)

        norm = column_norm(remainder)
        scale = column_norm(original)
        if norm == 0.0 or norm <= rank_tolerance * scale:
            raise DecompositionError(
                f"Column {i} is linearly dependent on the previous columns (remainder norm {norm:.3e})"
            )
        q[:, i] = remainder / norm

    r = multiply(transpose(q), a)
    # Entries below the diagonal are rounding noise from Qᵀ A.
    r = np.triu(r)
    return q, r
