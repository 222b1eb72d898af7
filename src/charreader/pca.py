"""
Covariance and principal components of a greyscale pixel matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .constants import DEFAULT_QR_ITERATIONS, DEFAULT_SNAP_TOLERANCE
from .eigen import EigenResult, eigen_decomposition
from .errors import ShapeMismatchError
from .linalg import as_matrix, multiply, transpose


def column_means(pixels: Any) -> np.ndarray:
    pixels = as_matrix(pixels, "pixel matrix")
    rows = pixels.shape[0]
    if rows == 0:
        raise ShapeMismatchError("pixel matrix has no rows")
    return np.array([pixels[:, j].sum() / rows for j in range(pixels.shape[1])], dtype=np.float64)


def covariance(pixels: Any) -> np.ndarray:
    """
    Sample covariance between the columns of ``pixels``.

    Rows are observations and columns are variables. The sum of centred
    products is divided by ``m - 1`` (``m`` = number of rows), so a constant
    pixel matrix yields the zero matrix.

    Raises:
        ShapeMismatchError: if ``pixels`` has fewer than two rows.
    """
    pixels = as_matrix(pixels, "pixel matrix")
    m = pixels.shape[0]
    if m < 2:
        raise ShapeMismatchError(f"covariance needs at least two rows, got {m}")
    centred = pixels - column_means(pixels)
    return multiply(transpose(centred), centred) / (m - 1)


@dataclass
class PrincipalComponents:
    """Principal axes of a pixel distribution, largest variance first."""

    mean: np.ndarray
    variances: np.ndarray
    components: np.ndarray

    @property
    def n_components(self) -> int:
        return int(self.components.shape[1])

    def explained_variance_ratio(self) -> np.ndarray:
        total = float(self.variances.sum())
        if total == 0.0:
            return np.zeros_like(self.variances)
        return self.variances / total

    def transform(self, pixels: Any) -> np.ndarray:
        """Project the centred rows of ``pixels`` onto the components."""
        pixels = as_matrix(pixels, "pixel matrix")
        if pixels.shape[1] != self.mean.shape[0]:
            raise ShapeMismatchError(
                f"expected {self.mean.shape[0]} columns, got {pixels.shape[1]}"
            )
        return multiply(pixels - self.mean, self.components)


def principal_components(
    pixels: Any,
    n_components: Optional[int] = None,
    iterations: int = DEFAULT_QR_ITERATIONS,
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE,
    verbose: bool = True,
) -> PrincipalComponents:
    """
    Eigen-decompose the covariance of ``pixels`` into principal components.

    Args:
        pixels: height x width matrix of grey intensities
        n_components: number of leading components to keep (all if None)
        iterations: QR algorithm budget
        snap_tolerance: see ``eigen.eigenvector``

    Returns:
        PrincipalComponents: sorted by decreasing variance
    """
    pixels = as_matrix(pixels, "pixel matrix")
    cov = covariance(pixels)
    result: EigenResult = eigen_decomposition(
        cov, iterations=iterations, snap_tolerance=snap_tolerance, verbose=verbose
    ).sorted(descending=True)

    keep = len(result) if n_components is None else int(n_components)
    if not 1 <= keep <= len(result):
        raise ValueError(f"n_components must be between 1 and {len(result)}, got {n_components}")

    return PrincipalComponents(
        mean=column_means(pixels),
        variances=result.eigenvalues[:keep].copy(),
        components=result.eigenvectors[:, :keep].copy(),
    )
