"""
Training drivers for the perceptron and the multilayer network.

Both loops run for a fixed number of epochs; there is no early stopping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix

from .errors import ShapeMismatchError
from .network import MultilayerNetwork
from .perceptron import Perceptron, RandomSource, make_rng


@dataclass
class TrainingHistory:
    """Per-epoch mean output error and accuracy."""

    errors: List[float] = field(default_factory=list)
    accuracies: List[float] = field(default_factory=list)

    @property
    def epochs(self) -> int:
        return len(self.errors)

    def record(self, error: float, accuracy: float) -> None:
        self.errors.append(float(error))
        self.accuracies.append(float(accuracy))


def _check_samples(samples: Any, labels: Any) -> tuple:
    X = np.asarray(samples, dtype=np.float64)
    y = np.asarray(labels)
    if X.ndim == 1:
        X = X.reshape(1, -1)
    elif X.ndim > 2:
        X = X.reshape(X.shape[0], -1)
    if X.shape[0] != y.shape[0]:
        raise ShapeMismatchError(f"{X.shape[0]} samples but {y.shape[0]} labels")
    if X.shape[0] == 0:
        raise ValueError("No samples to train on")
    return X, y


def train_network(
    network: MultilayerNetwork,
    samples: Any,
    labels: Sequence[int],
    epochs: int,
    shuffle: bool = False,
    rng: RandomSource = None,
    verbose: bool = True,
) -> TrainingHistory:
    """
    Train ``network`` by backpropagation.

    For every sample the expected output is set to the one-hot label, a
    forward pass runs, then backpropagation. ``samples`` holds one flattened
    pixel vector per row.

    Returns:
        TrainingHistory: mean ``sum|expected - output|`` and accuracy per epoch,
        measured on the forward pass that preceded each update.
    """
    X, y = _check_samples(samples, labels)
    if epochs < 1:
        raise ValueError(f"epochs must be at least 1, got {epochs}")
    generator = make_rng(rng) if shuffle else None

    history = TrainingHistory()
    report_every = max(1, epochs // 10)
    for epoch in range(epochs):
        order = generator.permutation(len(X)) if generator is not None else range(len(X))
        total_error = 0.0
        correct = 0
        for index in order:
            network.set_input(X[index])
            network.set_target(int(y[index]))
            output = network.forward_propagate()
            total_error += network.output_error()
            if int(np.argmax(output)) == int(y[index]):
                correct += 1
            network.backpropagate()
        history.record(total_error / len(X), correct / len(X))

        if verbose and ((epoch + 1) % report_every == 0 or epoch == 0):
            print(f"Epoch {epoch + 1:4d}/{epochs} - error: {history.errors[-1]:.4f} "
                  f"- acc: {history.accuracies[-1]:.4f}")
    return history


def train_perceptron(
    perceptron: Perceptron,
    samples: Any,
    targets: Sequence[float],
    eta: float,
    epochs: int,
) -> List[int]:
    """
    Single-perceptron learning with the perceptron rule.

    Returns:
        list: misclassified sample count for each epoch
    """
    X, t = _check_samples(samples, targets)
    if epochs < 1:
        raise ValueError(f"epochs must be at least 1, got {epochs}")
    mistakes: List[int] = []
    for _ in range(epochs):
        wrong = 0
        for x, target in zip(X, t):
            perceptron.expected_output = float(target)
            output = perceptron.compute_output(x)
            if output != float(target):
                wrong += 1
            perceptron.update_perceptron_rule(x, eta)
        mistakes.append(wrong)
    return mistakes


def evaluate_network(network: MultilayerNetwork, samples: Any, labels: Sequence[int]) -> Dict[str, Any]:
    """Classify every sample and report scikit-learn metrics."""
    X, y = _check_samples(samples, labels)
    y_pred = np.array([network.predict(x) for x in X])
    y_true = y.astype(int)
    classes = list(range(network.num_outputs))
    return {
        'accuracy': accuracy_score(y_true, y_pred),
        'predictions': y_pred,
        'classification_report': classification_report(
            y_true, y_pred, labels=classes, zero_division=0
        ),
        'confusion_matrix': confusion_matrix(y_true, y_pred, labels=classes),
    }


def plot_training_history(history: TrainingHistory, save_path: Optional[str] = None) -> None:
    """Plot error and accuracy curves; save to ``save_path`` or show them."""
    if history.epochs == 0:
        print("No training history available!")
        return

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 4))
    epochs = np.arange(1, history.epochs + 1)

    ax1.plot(epochs, history.accuracies, label='Training Accuracy')
    ax1.set_title('Network Accuracy')
    ax1.set_xlabel('Epoch')
    ax1.set_ylabel('Accuracy')
    ax1.legend()

    ax2.plot(epochs, history.errors, label='Output Error')
    ax2.set_title('Output Error')
    ax2.set_xlabel('Epoch')
    ax2.set_ylabel('Mean |expected - output|')
    ax2.legend()

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path)
        plt.close(fig)
        print(f"Training history saved to '{save_path}'")
    else:
        plt.show()
