"""A fully connected sigmoid network trained by backpropagation."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from typing import List, Tuple, Union

from fxnet.mathops import (
    Layers,
    Matrix,
    Vector,
    extract_biases,
    extract_weights,
    inject_biases,
    inject_weights,
    loss,
    loss_derivative,
    network_run_sum,
    outer_product,
    sigmoid_derivative,
    split,
    transpose_layers,
    vector_matrix_multiply,
    weighted_sums,
)

DEFAULT_ALPHA = 0.01

PathLike = Union[str, "os.PathLike[str]"]


def _parse_int(text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError as err:
        raise ValueError(f"invalid {what} in weights file: {text!r}") from err


def _counted_pieces(pieces: Sequence[str], count: int, what: str) -> Iterator[Tuple[int, str]]:
    """Yield ``count`` pairs of (declared size, content) from alternating pieces."""
    if len(pieces) < 2 * count:
        raise ValueError(f"weights file declares {count} {what} but holds fewer")
    fields = iter(pieces)
    for _ in range(count):
        size = _parse_int(next(fields), f"{what} size")
        yield size, next(fields)


class NeuralNetwork:
    """Layers of sigmoid neurons.

    ``weights[layer][neuron]`` holds the neuron's bias at index 0 followed by
    one weight for each output of the previous layer (or each network input).
    """

    def __init__(self, inputs: int, layer_sizes: Sequence[int], rand_func: Callable[[], float]):
        self.inputs = inputs
        self.rand_func = rand_func
        self.alpha = DEFAULT_ALPHA
        self.weights: Layers = []
        previous = inputs
        for size in layer_sizes:
            self.weights.append(
                [[rand_func() for _ in range(previous + 1)] for _ in range(size)]
            )
            previous = size

    def extract_biases(self) -> Matrix:
        """Biases of every neuron, layer by layer."""
        return extract_biases(self.weights)

    def extract_weights(self) -> Layers:
        """Input weights of every neuron, without the biases."""
        return extract_weights(self.weights)

    def inject_biases(self, biases: Sequence[Sequence[float]]) -> None:
        """Replace the biases of every neuron."""
        inject_biases(self.weights, biases)

    def inject_weights(self, extracted: Sequence[Sequence[Sequence[float]]]) -> None:
        """Replace the input weights of every neuron."""
        inject_weights(self.weights, extracted)

    def run(self, inputs: Sequence[float]) -> Vector:
        """Outputs of the last layer for the given inputs."""
        return network_run_sum(inputs, self.weights)

    def learn(self, inputs: Sequence[float], expected: Sequence[float]) -> float:
        """Take one gradient step towards ``expected``; return the loss before it."""
        if not self.weights:
            raise ValueError("network has no layers")

        values: List[Vector] = [list(inputs)]
        for index, layer in enumerate(self.weights):
            output = weighted_sums(values[-1], layer)
            if not output:
                raise RuntimeError(f"layer {index} produced no output")
            values.append(output)

        error = loss(values[-1], expected)

        deltas: Matrix = [[0.0] * len(layer) for layer in self.weights]
        deltas[-1] = [
            loss_derivative(target, output) * sigmoid_derivative(output)
            for target, output in zip(expected, values[-1])
        ]

        transposed = transpose_layers(self.extract_weights())
        changes: List[Matrix] = [[] for _ in self.weights]
        for index in reversed(range(len(self.weights))):
            changes[index] = outer_product(values[index], deltas[index])
            if index:
                propagated = vector_matrix_multiply(deltas[index], transposed[index])
                previous = [
                    err * sigmoid_derivative(value)
                    for err, value in zip(propagated, values[index])
                ]
                deltas[index - 1][: len(previous)] = previous

        for layer, layer_deltas, layer_changes in zip(self.weights, deltas, changes):
            for position, (neuron, delta) in enumerate(zip(layer, layer_deltas)):
                neuron[0] -= self.alpha * delta
                for k, row in enumerate(layer_changes, start=1):
                    neuron[k] -= self.alpha * row[position]

        return error

    def _serialise(self) -> str:
        parts = [f"{len(self.weights)} "]
        for layer in self.weights:
            parts.append(f"{len(layer)};")
            for neuron in layer:
                parts.append(f"{len(neuron)}:")
                parts.extend(f"{value:f}," for value in neuron)
                parts.append(":")
            parts.append(";")
        parts.append(f" {self.inputs}")
        return "".join(parts)

    def save_weights(self, filename: PathLike) -> int:
        """Write the weights into an existing file and return the body length.

        The file starts with the body length on its own line, followed by the
        body. The file is written from its start; it must already exist.
        """
        body = self._serialise()
        with open(filename, "r+", encoding="ascii", newline="") as stream:
            stream.write(f"{len(body)}\n{body}")
        return len(body)

    def load_weights(self, filename: PathLike) -> None:
        """Replace the weights and input count with those stored in ``filename``."""
        with open(filename, encoding="ascii", newline="") as stream:
            header = stream.readline()
            length = _parse_int(header.strip(), "length header")
            body = stream.read(length)

        sections = body.split(" ")
        if len(sections) != 3:
            raise ValueError("weights file body must have three space separated sections")
        layer_count = _parse_int(sections[0], "layer count")
        inputs = _parse_int(sections[2], "input count")

        weights: Layers = []
        for neuron_count, layer_text in _counted_pieces(
            split(sections[1], ";"), layer_count, "layers"
        ):
            layer: Matrix = []
            for value_count, neuron_text in _counted_pieces(
                split(layer_text, ":"), neuron_count, "neurons"
            ):
                try:
                    values = [float(piece) for piece in split(neuron_text, ",")]
                except ValueError as err:
                    raise ValueError(f"invalid weight in weights file: {neuron_text!r}") from err
                if len(values) < value_count:
                    raise ValueError(
                        f"neuron declares {value_count} values but holds {len(values)}"
                    )
                layer.append(values[:value_count])
            weights.append(layer)

        self.weights = weights
        self.inputs = inputs