"""
Eigen decomposition of square real matrices by the unshifted QR algorithm.

Eigenvalues are read off the diagonal of the (approximate) Schur form reached
after a fixed number of QR iterations. Each eigenvector is then recovered by
row-reducing ``A - λI`` and solving the homogeneous system, with columns
that carry no pivot treated as free variables fixed to 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from .constants import DEFAULT_QR_ITERATIONS, DEFAULT_SNAP_TOLERANCE, SNAP_SCALE
from .linalg import column_norm, identity, multiply, require_square
from .qr import qr_decompose


@dataclass
class EigenResult:
    """Eigenvalues and the matching eigenvectors (column ``i`` pairs with value ``i``)."""

    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    degenerate: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return int(self.eigenvalues.shape[0])

    def vector(self, index: int) -> np.ndarray:
        return self.eigenvectors[:, index].copy()

    def pairs(self) -> Iterator[Tuple[float, np.ndarray]]:
        for i in range(len(self)):
            yield float(self.eigenvalues[i]), self.vector(i)

    def sorted(self, descending: bool = True) -> "EigenResult":
        """Return a copy ordered by eigenvalue."""
        order = np.argsort(self.eigenvalues, kind="stable")
        if descending:
            order = order[::-1]
        position = {int(old): new for new, old in enumerate(order)}
        return EigenResult(
            eigenvalues=self.eigenvalues[order].copy(),
            eigenvectors=self.eigenvectors[:, order].copy(),
            degenerate=sorted(position[i] for i in self.degenerate),
        )


def schur_form(a: Any, iterations: int = DEFAULT_QR_ITERATIONS) -> np.ndarray:
    """
    Run ``iterations`` steps of ``A <- RQ`` where ``(Q, R) = QR(A)``.

    There is no convergence test: the loop stops when the budget
    is spent, so badly conditioned or large matrices may come back only
    partially triangularised.
    """
    current = require_square(a, "Schur input")
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations}")
    for _ in range(iterations):
        q, r = qr_decompose(current)
        current = multiply(r, q)
    return current


def eigenvalues(a: Any, iterations: int = DEFAULT_QR_ITERATIONS) -> np.ndarray:
    """Diagonal of the Schur form, in whatever order the iteration produced."""
    schur = schur_form(a, iterations)
    return np.array([schur[i, i] for i in range(schur.shape[0])], dtype=np.float64)


def _null_vector(shifted: np.ndarray, threshold: float) -> Tuple[np.ndarray, Optional[str]]:
    """Solve ``shifted @ x = 0`` by Gaussian elimination; return ``(x, caveat)``."""
    m = shifted.copy()
    n = m.shape[0]

    pivots: List[Tuple[int, int]] = []
    row = 0
    for col in range(n):
        if row >= n:
            break
        best = row + int(np.argmax(np.abs(m[row:, col])))
        if abs(m[best, col]) <= threshold:
            m[row:, col] = 0.0
            continue
        if best != row:
            m[[row, best], :] = m[[best, row], :]
        for r in range(row + 1, n):
            factor = m[r, col] / m[row, col]
            m[r, :] -= factor * m[row, :]
            m[r, np.abs(m[r, :]) <= threshold] = 0.0
            m[r, col] = 0.0
        pivots.append((row, col))
        row += 1

    caveat = None
    pivot_cols = {c for _, c in pivots}
    free = [c for c in range(n) if c not in pivot_cols]
    if not free:
        # Shifted matrix looks full rank; release the last pivot column.
        _, last_col = pivots.pop()
        free = [last_col]
        caveat = "no free variable found, last column fixed to 1"
    elif len(free) > 1:
        caveat = f"{len(free)} free variables, each fixed to 1"

    x = np.zeros(n, dtype=np.float64)
    x[free] = 1.0
    for r, c in reversed(pivots):
        rest = float(np.dot(m[r, c + 1:], x[c + 1:]))
        x[c] = -rest / m[r, c]
    return x, caveat


def eigenvector(
    a: Any,
    eigenvalue: float,
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE,
    verbose: bool = True,
) -> np.ndarray:
    """
    Unit eigenvector of ``a`` for ``eigenvalue``.

    ``A - λI`` is reduced to row-echelon form with partial pivoting. Entries
    smaller than ``snap_tolerance * SNAP_SCALE * max|A|`` are snapped to zero.
    Columns left without a pivot are free and set to 1; back-substitution
    fills in the rest.
    """
    vector, caveat = _eigenvector(require_square(a, "eigenvector input"), eigenvalue, snap_tolerance)
    if caveat and verbose:
        print(f"Warning: singular system for eigenvalue {eigenvalue:.6g}: {caveat}")
    return vector


def _eigenvector(a: np.ndarray, eigenvalue: float, snap_tolerance: float) -> Tuple[np.ndarray, Optional[str]]:
    n = a.shape[0]
    shifted = a - eigenvalue * identity(n)
    threshold = snap_tolerance * SNAP_SCALE * float(np.max(np.abs(a)))
    x, caveat = _null_vector(shifted, threshold)
    norm = column_norm(x)
    if norm > 0.0:
        x = x / norm
    return x, caveat


def eigen_decomposition(
    a: Any,
    iterations: int = DEFAULT_QR_ITERATIONS,
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE,
    verbose: bool = True,
) -> EigenResult:
    """
    Eigenvalues and eigenvectors of a square matrix.

    Any DecompositionError raised while iterating abandons the whole request.

    Returns:
        EigenResult: eigenvalues in convergence order, eigenvectors as columns.
    """
    a = require_square(a, "eigen input")
    values = eigenvalues(a, iterations)
    n = a.shape[0]
    vectors = np.zeros((n, n), dtype=np.float64)
    degenerate: List[int] = []
    for i, value in enumerate(values):
        vec, caveat = _eigenvector(a, float(value), snap_tolerance)
        vectors[:, i] = vec
        if caveat:
            degenerate.append(i)
            if verbose:
                print(f"Warning: singular system for eigenvalue {value:.6g}: {caveat}")
    return EigenResult(eigenvalues=values, eigenvectors=vectors, degenerate=degenerate)
