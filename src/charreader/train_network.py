"""
Training script for the character-reading perceptron network.

Usage:
  charreader-train --manifest labels.csv --root images/ --layers 30 26 --epochs 1000
  charreader-train --quick-test
"""

from __future__ import annotations

import argparse
import os
import time
from typing import List, Optional, Sequence

import numpy as np

from .constants import (
    DEFAULT_BINARIZE_THRESHOLD,
    DEFAULT_EPOCHS,
    DEFAULT_ETA,
    DEFAULT_LAYER_WIDTHS,
    DEFAULT_QR_ITERATIONS,
    NetworkConfig,
)
from .dataset import get_class_distribution, load_samples, read_label_manifest
from .errors import CharReaderError
from .network import MultilayerNetwork
from .pca import principal_components
from .preprocessing import PixelPreprocessor, load_image
from .training import evaluate_network, plot_training_history, train_network

# 5x7 glyphs for the quick test: A, B, C.
_GLYPHS = {
    0: ["01110", "10001", "10001", "11111", "10001", "10001", "10001"],
    1: ["11110", "10001", "10001", "11110", "10001", "10001", "11110"],
    2: ["01111", "10000", "10000", "10000", "10000", "10000", "01111"],
}


def glyph_matrix(label: int) -> np.ndarray:
    return np.array([[float(ch) for ch in row] for row in _GLYPHS[label]])


def synthetic_samples(per_class: int = 10, noise: float = 0.05, seed: int = 0):
    """Noisy copies of the built-in glyphs as ``(X, y)``."""
    rng = np.random.default_rng(seed)
    X: List[np.ndarray] = []
    y: List[int] = []
    for label in sorted(_GLYPHS):
        base = glyph_matrix(label)
        for _ in range(per_class):
            flips = rng.random(base.shape) < noise
            X.append(np.where(flips, 1.0 - base, base).reshape(-1))
            y.append(label)
    return np.vstack(X), np.asarray(y)


def train_and_evaluate(X: np.ndarray, y: np.ndarray, config: NetworkConfig,
                       num_classes: Optional[int] = None, plot_path: Optional[str] = None):
    """Build a network for ``X``/``y``, train it and print an evaluation report."""
    widths = list(config.layer_widths)
    classes = num_classes or int(y.max()) + 1
    if widths[-1] < classes:
        raise ValueError(f"Output layer has {widths[-1]} neurons but labels go up to {classes - 1}")

    network = MultilayerNetwork(
        eta=config.eta,
        layer_widths=widths,
        num_inputs=X.shape[1],
        activations=config.activation,
        rng=config.seed,
    )
    print(network.summary())

    print("\nTraining network...")
    start_time = time.time()
    history = train_network(network, X, y, epochs=config.epochs, shuffle=False)
    print(f"Training completed in {time.time() - start_time:.2f} seconds")

    results = evaluate_network(network, X, y)
    print(f"\nTraining-set accuracy: {results['accuracy']:.4f}")
    print(results['classification_report'])

    if plot_path:
        plot_training_history(history, save_path=plot_path)
    return network, history, results


def report_principal_components(pixels: np.ndarray, count: int, iterations: int) -> None:
    pcs = principal_components(pixels, n_components=count, iterations=iterations)
    ratios = pcs.explained_variance_ratio()
    print(f"\nLeading {pcs.n_components} principal components:")
    for i, (variance, ratio) in enumerate(zip(pcs.variances, ratios), start=1):
        print(f"  PC{i}: variance={variance:.4f} ({ratio:.1%})")


def quick_test(config: NetworkConfig) -> None:
    """Train on the built-in glyphs instead of image files."""
    print("Running quick test with built-in glyphs...")
    X, y = synthetic_samples(seed=config.seed or 0)
    widths = config.layer_widths
    if widths == DEFAULT_LAYER_WIDTHS:
        widths = (8, len(_GLYPHS))
    quick = NetworkConfig(eta=config.eta, layer_widths=tuple(widths),
                          epochs=min(config.epochs, 200), activation=config.activation,
                          seed=config.seed)
    train_and_evaluate(X, y, quick, num_classes=len(_GLYPHS))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Train the character-reading perceptron network")
    parser.add_argument("--quick-test", action="store_true", help="Train on built-in glyphs")
    parser.add_argument("--manifest", type=str, default=None, help="CSV of sample,label pairs")
    parser.add_argument("--root", type=str, default=".", help="Directory the samples are relative to")
    parser.add_argument("--layers", type=int, nargs="+", default=list(DEFAULT_LAYER_WIDTHS),
                        help="Neurons per layer, input side first")
    parser.add_argument("--eta", type=float, default=DEFAULT_ETA, help="Learning rate")
    parser.add_argument("--epochs", type=int, default=DEFAULT_EPOCHS, help="Training epochs")
    parser.add_argument("--activation", choices=["step", "bipolar_step", "identity", "tanh"],
                        default="step", help="Activation used by every layer")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the initial weights")
    parser.add_argument("--size", type=int, nargs=2, metavar=("WIDTH", "HEIGHT"), default=None,
                        help="Resize images before flattening")
    parser.add_argument("--threshold", type=float, default=DEFAULT_BINARIZE_THRESHOLD,
                        help="Binarisation threshold on 0-255 grey values")
    parser.add_argument("--grey-method", choices=["L", "A", "I"], default="L",
                        help="RGB to grey conversion: luminosity, average or lightness")
    parser.add_argument("--plot", type=str, default=None, help="Save the training history plot here")
    parser.add_argument("--pca", type=int, default=0, metavar="N",
                        help="Report N principal components of the first image; the grey image must be "
                             "taller than it is wide and have no constant columns, otherwise its "
                             "covariance is singular and the report fails")
    parser.add_argument("--qr-iterations", type=int, default=DEFAULT_QR_ITERATIONS,
                        help="QR algorithm iteration budget for --pca")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = NetworkConfig(eta=args.eta, layer_widths=tuple(args.layers), epochs=args.epochs,
                           activation=args.activation, seed=args.seed)

    if args.quick_test:
        quick_test(config)
        return 0
    if not args.manifest:
        print("Error: --manifest is required unless --quick-test is given")
        return 2

    try:
        manifest = read_label_manifest(args.manifest)
        print(f"Class distribution: {get_class_distribution(manifest)}")
        preprocessor = PixelPreprocessor(
            target_size=tuple(args.size) if args.size else None,
            grey_method=args.grey_method,
            threshold=args.threshold,
        )
        X, y = load_samples(manifest, root=args.root, preprocessor=preprocessor)
        train_and_evaluate(X, y, config, plot_path=args.plot)

        if args.pca > 0:
            sample, _ = manifest[0]
            path = sample if os.path.isabs(sample) else os.path.join(args.root, sample)
            pixels = preprocessor.resize(preprocessor.to_greyscale(load_image(path)))
            report_principal_components(pixels, args.pca, args.qr_iterations)
    except FileNotFoundError as e:
        print(f"\nError: {e}")
        return 1
    except CharReaderError as e:
        print(f"\nNumerical error: {e}")
        return 1
    except ValueError as e:
        print(f"\nError: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
