"""
Fully connected feed-forward network of perceptrons trained by error
backpropagation.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Union

import numpy as np

from .activations import Activation
from .constants import MAX_LAYERS
from .errors import NullInputError, ShapeMismatchError
from .linalg import as_vector
from .perceptron import Perceptron, RandomSource, make_rng

ActivationSpec = Union[Activation, str, Sequence[Union[Activation, str]], None]


def one_hot(label: int, num_classes: int) -> np.ndarray:
    """Vector of ``num_classes`` zeros with a 1 at ``label``."""
    if num_classes < 1:
        raise ValueError(f"num_classes must be positive, got {num_classes}")
    if not 0 <= int(label) < num_classes:
        raise ValueError(f"Label {label} outside 0..{num_classes - 1}")
    vector = np.zeros(num_classes, dtype=np.float64)
    vector[int(label)] = 1.0
    return vector


class MultilayerNetwork:
    """
    Stack of perceptron layers.

    Every neuron in layer ``i`` takes the outputs of layer ``i - 1`` as
    inputs (layer 0 takes the network input). The last layer's width is the
    number of labels.

    Args:
        eta: learning rate
        layer_widths: neurons per layer, input side first
        num_inputs: length of the input vector
        activations: one activation for every layer, or one per layer;
            unit step by default
        rng: Generator or integer seed used for the initial weights
    """

    def __init__(self, eta: float, layer_widths: Sequence[int], num_inputs: int,
                 activations: ActivationSpec = None, rng: RandomSource = None) -> None:
        if layer_widths is None:
            raise NullInputError("layer_widths is required, got None")
        widths = []
        for index, width in enumerate(layer_widths):
            if isinstance(width, bool) or int(width) != width:
                raise ValueError(f"Number of neurons in layer {index + 1} must be an integer, got {width!r}")
            widths.append(int(width))
        if not 1 <= len(widths) <= MAX_LAYERS:
            raise ValueError(f"Number of layers must be between 1 and {MAX_LAYERS}, got {len(widths)}")
        if num_inputs < 1:
            raise ValueError(f"Number of inputs to the network can not be zero, got {num_inputs}")
        for index, width in enumerate(widths):
            if width < 1:
                raise ValueError(f"Number of neurons in layer {index + 1} can not be zero")

        self.eta = float(eta)
        self.num_inputs = int(num_inputs)
        self.layer_widths = widths
        self.activations = self._resolve_activations(activations, len(widths))

        generator = make_rng(rng)
        self.inputs = np.zeros(self.num_inputs, dtype=np.float64)
        self.expected_output = np.zeros(widths[-1], dtype=np.float64)
        self.outputs: List[np.ndarray] = [np.zeros(w, dtype=np.float64) for w in widths]
        self.layers: List[List[Perceptron]] = []
        for index, width in enumerate(widths):
            fan_in = self.num_inputs if index == 0 else widths[index - 1]
            self.layers.append([
                Perceptron(fan_in, self.activations[index], rng=generator)
                for _ in range(width)
            ])

    @staticmethod
    def _resolve_activations(activations: ActivationSpec, depth: int) -> List[Activation]:
        if activations is None:
            return [Activation.STEP] * depth
        if isinstance(activations, (Activation, str)):
            return [Activation.parse(activations)] * depth
        resolved = [Activation.parse(a) for a in activations]
        if len(resolved) != depth:
            raise ValueError(f"Expected {depth} activations, got {len(resolved)}")
        return resolved

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def num_outputs(self) -> int:
        return self.layer_widths[-1]

    def set_input(self, vector: Any) -> None:
        vector = as_vector(vector, "input vector")
        if vector.shape[0] != self.num_inputs:
            raise ShapeMismatchError(f"Expected {self.num_inputs} inputs, got {vector.shape[0]}")
        self.inputs = vector

    def set_expected(self, vector: Any) -> None:
        vector = as_vector(vector, "expected output")
        if vector.shape[0] != self.num_outputs:
            raise ShapeMismatchError(f"Expected {self.num_outputs} outputs, got {vector.shape[0]}")
        self.expected_output = vector
        for neuron, target in zip(self.layers[-1], self.expected_output):
            neuron.expected_output = float(target)

    def set_target(self, label: int) -> None:
        """Set the expected output to the one-hot encoding of ``label``."""
        self.set_expected(one_hot(label, self.num_outputs))

    def forward_propagate(self) -> np.ndarray:
        """One full pass from the input to the last layer; returns its outputs."""
        layer_input = self.inputs
        for index, layer in enumerate(self.layers):
            out = self.outputs[index]
            for j, neuron in enumerate(layer):
                out[j] = neuron.compute_output(layer_input)
            layer_input = out
        return self.outputs[-1].copy()

    def backpropagate(self) -> None:
        """
        Update every weight from the error of the last forward pass.

        Output delta is ``expected - output``. Hidden deltas are the
        weighted sum of the deltas of the layer ahead (taken before that
        layer's weights move), times ``1 - output**2`` for tanh neurons only.
        Layers are updated from the output back towards the input.
        """
        last = self.num_layers - 1
        delta = self.expected_output - self.outputs[last]

        for i in range(last, 0, -1):
            previous_out = self.outputs[i - 1]
            ahead = np.vstack([neuron.weights for neuron in self.layers[i]])
            back_delta = ahead.T @ delta
            for j, neuron in enumerate(self.layers[i - 1]):
                back_delta[j] *= neuron.activation.derivative_factor(previous_out[j])

            for k, neuron in enumerate(self.layers[i]):
                neuron.weights = neuron.weights + self.eta * delta[k] * previous_out
                neuron.bias_weight += self.eta * delta[k] * neuron.bias

            delta = back_delta

        for k, neuron in enumerate(self.layers[0]):
            neuron.weights = neuron.weights + self.eta * delta[k] * self.inputs
            neuron.bias_weight += self.eta * delta[k] * neuron.bias

    def output_error(self) -> float:
        """Sum of absolute differences between expected and actual outputs."""
        return float(np.abs(self.expected_output - self.outputs[-1]).sum())

    def predict(self, vector: Any) -> int:
        """Run a forward pass on ``vector`` and return the strongest output."""
        self.set_input(vector)
        return int(np.argmax(self.forward_propagate()))

    def summary(self) -> str:
        lines = [
            f"Number of inputs to the network = {self.num_inputs}",
            f"Number of layers = {self.num_layers}",
            f"Learning rate = {self.eta:g}",
            "---",
        ]
        for index, layer in enumerate(self.layers):
            fan_in = self.num_inputs if index == 0 else self.layer_widths[index - 1]
            params = len(layer) * (fan_in + 1)
            lines.append(
                f"Layer {index + 1}: {len(layer)} neurons, activation={self.activations[index].value}, "
                f"params={params}"
            )
        expected = " ".join(f"{v:g}" for v in self.expected_output)
        lines.append("---")
        lines.append(f"Expected output: {expected}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"MultilayerNetwork(eta={self.eta:g}, layer_widths={self.layer_widths}, num_inputs={self.num_inputs})"
