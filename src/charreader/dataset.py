"""
Label manifests and sample assembly for training.

A manifest is a small delimited text file with one ``sample,label`` pair per
line (a header line with those names is optional). Sample identifiers are
image paths, relative to the manifest's image root.
"""

from __future__ import annotations

import os
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .preprocessing import PixelPreprocessor


def read_label_manifest(path: str) -> List[Tuple[str, int]]:
    """
    Read ``(sample_identifier, label_index)`` pairs in file order.

    Raises:
        FileNotFoundError: if the manifest does not exist.
        ValueError: if a label is not a non-negative integer.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Label manifest not found: {path}")

    frame = pd.read_csv(
        path,
        sep=None,
        engine="python",
        header=None,
        names=["sample", "label"],
        comment="#",
        skipinitialspace=True,
        dtype=str,
    )
    frame = frame.dropna(how="all")
    if not frame.empty and str(frame.iloc[0]["label"]).strip().lower() == "label":
        frame = frame.iloc[1:]
    if frame.empty:
        raise ValueError(f"Label manifest {path} has no entries")

    pairs: List[Tuple[str, int]] = []
    for line, (sample, label) in enumerate(zip(frame["sample"], frame["label"]), start=1):
        if pd.isna(label):
            raise ValueError(f"Missing label for sample {sample!r} in {path}")
        try:
            index = int(str(label).strip())
        except ValueError:
            raise ValueError(f"Label {label!r} for sample {sample!r} is not an integer") from None
        if index < 0:
            raise ValueError(f"Label {index} for sample {sample!r} is negative")
        pairs.append((str(sample).strip(), index))
    return pairs


def get_class_distribution(manifest: List[Tuple[str, int]]) -> Dict[int, int]:
    labels = pd.Series([label for _, label in manifest])
    return {int(k): int(v) for k, v in labels.value_counts().sort_index().items()}


def load_samples(
    manifest: List[Tuple[str, int]],
    root: str = ".",
    preprocessor: Optional[PixelPreprocessor] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Turn every manifest entry into a flattened pixel vector.

    Returns:
        tuple: (X, y) with one row of X per sample

    Raises:
        ValueError: if the images do not all have the same size.
    """
    if not manifest:
        raise ValueError("Manifest is empty")
    pre = preprocessor or PixelPreprocessor()
    vectors = []
    labels = []
    for sample, label in manifest:
        path = sample if os.path.isabs(sample) else os.path.join(root, sample)
        vectors.append(pre.prepare(path))
        labels.append(label)

    lengths = {v.shape[0] for v in vectors}
    if len(lengths) > 1:
        raise ValueError(
            f"Images have different sizes ({sorted(lengths)} pixels); set a target size to resize them"
        )
    print(f"Loaded {len(vectors)} samples of {lengths.pop()} pixels")
    return np.vstack(vectors), np.asarray(labels, dtype=np.int64)
