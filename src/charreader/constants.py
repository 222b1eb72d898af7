"""
Default configuration for the eigen engine and the perceptron network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# QR algorithm runs for a fixed budget; there is no convergence check.
DEFAULT_QR_ITERATIONS: int = 50

# Row-reduction entries below DEFAULT_SNAP_TOLERANCE * SNAP_SCALE * max|A|
# are snapped to zero.
DEFAULT_SNAP_TOLERANCE: float = 0.1
SNAP_SCALE: float = 1e-6

# Gram-Schmidt remainder norm (relative to the column norm) treated as zero.
QR_RANK_TOLERANCE: float = 1e-12

# Deepest network the trainer will build.
MAX_LAYERS: int = 3

# Training defaults for the character network.
DEFAULT_ETA: float = 0.018
DEFAULT_LAYER_WIDTHS: Tuple[int, ...] = (30, 26)
DEFAULT_EPOCHS: int = 1000
DEFAULT_BINARIZE_THRESHOLD: float = 100.0

# Weights for RGB to grey conversion.
LUMINOSITY_WEIGHTS: Tuple[float, float, float] = (0.21, 0.72, 0.07)


@dataclass(frozen=True)
class NetworkConfig:
    """Hyper-parameters for building and training a network."""

    eta: float = DEFAULT_ETA
    layer_widths: Tuple[int, ...] = DEFAULT_LAYER_WIDTHS
    epochs: int = DEFAULT_EPOCHS
    activation: str = "step"
    seed: int | None = None
