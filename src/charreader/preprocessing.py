"""
Pixel preparation for the network and for PCA.

Turns an image file into a grey pixel matrix, and a pixel matrix into the
flat row-major input vector the network consumes.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .constants import DEFAULT_BINARIZE_THRESHOLD, LUMINOSITY_WEIGHTS
from .errors import NullInputError, ShapeMismatchError


def load_image(image_path: str) -> np.ndarray:
    """
    Read an image file as a float array of 0-255 intensities.

    Greyscale and palette-indexed grey files come back as H x W; anything
    with colour comes back as H x W x 3 (RGB).
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Image not found: {image_path}")
    with Image.open(image_path) as img:
        if img.mode in ("1", "L", "I", "F", "I;16"):
            data = np.asarray(img.convert("F"), dtype=np.float64)
        else:
            data = np.asarray(img.convert("RGB"), dtype=np.float64)
    return data


class PixelPreprocessor:
    """Grey conversion, optional resize and binarisation for character images."""

    def __init__(self, target_size: Optional[Tuple[int, int]] = None,
                 grey_method: str = "L",
                 threshold: Optional[float] = DEFAULT_BINARIZE_THRESHOLD) -> None:
        self.target_size = target_size
        self.grey_method = grey_method
        self.threshold = threshold

    def to_greyscale(self, image: np.ndarray, method: Optional[str] = None) -> np.ndarray:
        """
        Convert an RGB image to grey.

        Methods:
            'L': luminosity, weighted average of the channels (default)
            'A': plain average of the channels
            'I': lightness, mean of the largest and smallest channel
        """
        if image is None:
            raise NullInputError("image is required, got None")
        image = np.asarray(image, dtype=np.float64)
        if image.ndim == 2:
            return image.copy()
        if image.ndim != 3 or image.shape[2] < 3:
            raise ShapeMismatchError(f"Expected H x W or H x W x 3 image, got {image.shape}")

        rgb = image[:, :, :3]
        method = (method or self.grey_method).upper()
        if method == "L":
            r, g, b = LUMINOSITY_WEIGHTS
            return r * rgb[:, :, 0] + g * rgb[:, :, 1] + b * rgb[:, :, 2]
        if method == "A":
            return rgb.mean(axis=2)
        if method == "I":
            return (rgb.max(axis=2) + rgb.min(axis=2)) / 2.0
        raise ValueError(f"Unknown grey conversion method {method!r}. Use 'L', 'A' or 'I'.")

    def binarize(self, image: np.ndarray, threshold: Optional[float] = None) -> np.ndarray:
        """Pixels at or above ``threshold`` become 1, the rest 0."""
        if image is None:
            raise NullInputError("image is required, got None")
        limit = self.threshold if threshold is None else threshold
        if limit is None:
            raise ValueError("No binarisation threshold configured")
        return (np.asarray(image, dtype=np.float64) >= limit).astype(np.float64)

    def normalize(self, image: np.ndarray) -> np.ndarray:
        """Scale 0-255 intensities to [0, 1]."""
        return np.asarray(image, dtype=np.float64) / 255.0

    def resize(self, image: np.ndarray) -> np.ndarray:
        if self.target_size is None:
            return np.asarray(image, dtype=np.float64)
        width, height = self.target_size
        grey = Image.fromarray(np.ascontiguousarray(image, dtype=np.float32))
        return np.asarray(grey.resize((width, height), Image.Resampling.BILINEAR), dtype=np.float64)

    @staticmethod
    def image_vector(image: np.ndarray) -> np.ndarray:
        """Flatten a pixel matrix row by row."""
        image = np.asarray(image, dtype=np.float64)
        if image.ndim != 2:
            raise ShapeMismatchError(f"Expected a 2-D pixel matrix, got {image.shape}")
        return image.reshape(-1).copy()

    def pixel_matrix(self, image: np.ndarray) -> np.ndarray:
        """Grey, resized and (if a threshold is set) binarised pixel matrix."""
        grey = self.resize(self.to_greyscale(image))
        if self.threshold is not None:
            return self.binarize(grey)
        return self.normalize(grey)

    def prepare(self, image_path: str) -> np.ndarray:
        """Full pipeline from an image file to a network input vector."""
        return self.image_vector(self.pixel_matrix(load_image(image_path)))
