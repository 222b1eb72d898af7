"""
Single perceptron: weighted inputs, a bias and an activation function.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np

from .activations import Activation
from .errors import ShapeMismatchError
from .linalg import as_vector

RandomSource = Union[np.random.Generator, int, None]


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """Accept a Generator, an integer seed or None."""
    return np.random.default_rng(rng)


class Perceptron:
    """
    One neuron with ``num_inputs`` weights.

    Weights and the bias weight start uniform in [-1, 1]; the bias value
    itself is fixed at 1.0. ``expected_output`` is set by the caller before a
    learning step.
    """

    def __init__(self, num_inputs: int,
                 activation: Union[Activation, str] = Activation.STEP,
                 rng: RandomSource = None) -> None:
        if num_inputs < 1:
            raise ValueError(f"A perceptron needs at least one input, got {num_inputs}")
        generator = make_rng(rng)
        self.num_inputs = int(num_inputs)
        self.activation = Activation.parse(activation)
        self.weights = generator.uniform(-1.0, 1.0, self.num_inputs)
        self.bias = 1.0
        self.bias_weight = float(generator.uniform(-1.0, 1.0))
        self.output = 0.0
        self.expected_output = 0.0

    def set_weights(self, weights: Any, bias_weight: float,
                    activation: Optional[Union[Activation, str]] = None) -> None:
        """Copy ``weights`` into the neuron and replace the bias weight."""
        weights = as_vector(weights, "weights")
        if weights.shape[0] != self.num_inputs:
            raise ShapeMismatchError(
                f"Expected {self.num_inputs} weights, got {weights.shape[0]}"
            )
        self.weights = weights
        self.bias_weight = float(bias_weight)
        if activation is not None:
            self.activation = Activation.parse(activation)

    def _check_inputs(self, inputs: Any) -> np.ndarray:
        inputs = as_vector(inputs, "inputs")
        if inputs.shape[0] != self.num_inputs:
            raise ShapeMismatchError(
                f"Expected {self.num_inputs} inputs, got {inputs.shape[0]}"
            )
        return inputs

    def compute_output(self, inputs: Any) -> float:
        """Set and return ``activation(w . x + bias * bias_weight)``."""
        inputs = self._check_inputs(inputs)
        weighted = float(np.dot(self.weights, inputs)) + self.bias * self.bias_weight
        self.output = self.activation(weighted)
        return self.output

    def update_perceptron_rule(self, inputs: Any, eta: float) -> None:
        """
        Perceptron learning rule:
            w_i += eta * (expected - output) * x_i
            bias_weight += eta * (expected - output)
        """
        inputs = self._check_inputs(inputs)
        error = self.expected_output - self.output
        self.weights = self.weights + eta * error * inputs
        self.bias_weight += eta * error

    def summary(self) -> str:
        weights = " ".join(f"{w:f}" for w in self.weights)
        return "\n".join([
            f"Number of inputs: {self.num_inputs}",
            f"Weights: {weights}",
            f"Bias weight: {self.bias_weight:f}",
            f"Activation: {self.activation.value}",
            f"Output = {self.output:f}, expected output = {self.expected_output:f}",
        ])

    def __repr__(self) -> str:
        return (f"Perceptron(num_inputs={self.num_inputs}, "
                f"activation={self.activation.value}, output={self.output:g})")
