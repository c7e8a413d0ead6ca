"""Vector and matrix helpers, activation and loss functions, and data parsing."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from typing import List, Optional, TextIO, Union

Vector = List[float]
Matrix = List[List[float]]
Layers = List[List[List[float]]]

DEFAULT_MAX_LINES = 200000

_NUMBER = re.compile(
    r"\s*([+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))",
    re.IGNORECASE,
)


class ShapeMismatchError(ValueError):
    """Raised when operands do not have compatible sizes."""


def _is_matrix(value: Sequence) -> bool:
    return len(value) > 0 and isinstance(value[0], (list, tuple))


def _strtod(text: str) -> float:
    """Parse the leading number of ``text``; 0.0 when there is none."""
    match = _NUMBER.match(text)
    return float(match.group(1)) if match else 0.0


def squared_error(prediction: float, expected: float) -> float:
    """Squared difference between a prediction and its expected value."""
    return (prediction - expected) * (prediction - expected)


def loss(prediction: Sequence[float], expected: Sequence[float]) -> float:
    """Mean squared error between two vectors."""
    error = subtract(prediction, expected)
    if not error:
        return math.nan
    return sum(e * e for e in error) / len(error)


def loss_derivative(prediction: float, expected: float) -> float:
    """Derivative term of the squared error."""
    return 2 * (expected - prediction)


def sigmoid(x: float) -> float:
    """Logistic function, safe against overflow for large magnitudes."""
    if x >= 0:
        return 1 / (1 + math.exp(-x))
    e = math.exp(x)
    return e / (1 + e)


def sigmoid_derivative(x: float) -> float:
    """Derivative of the sigmoid expressed through its output ``x``."""
    return x * (1 - x)


def inverse_decimal(d: float) -> float:
    """Return ``1 - |d|``."""
    return 1.0 - abs(d)


def split(text: str, separators: str) -> List[str]:
    """Split ``text`` on any character in ``separators``.

    Only pieces that are terminated by a separator are returned; text after the
    last separator is dropped.
    """
    pieces = []
    start = 0
    for position, char in enumerate(text):
        if char in separators:
            pieces.append(text[start:position])
            start = position + 1
    return pieces


def split_skip(text: str, separators: str, n: int) -> List[str]:
    """Like :func:`split`, but discard the first ``n`` pieces."""
    return split(text, separators)[n:]


def parse_datapoint(line: str) -> Vector:
    """Parse one tab separated price line into high, low, close and volume.

    The first two fields (timestamp and open) are skipped, and the volume is
    mapped into ``1 - |1 / volume|``.
    """
    values = [_strtod(piece) for piece in split_skip(line, "\t\r", 2)]
    if not values:
        raise ValueError(f"no values in line: {line!r}")
    last = values[-1]
    if last == 0:
        values[-1] = -math.inf
    else:
        values[-1] = inverse_decimal(1 / last)
    return values


def format_audusd_data(stream: Iterable[str], max_lines: Optional[int] = None) -> Matrix:
    """Parse every line of ``stream`` with :func:`parse_datapoint`.

    At most ``max_lines`` rows are read; ``None`` or a negative value means the
    default cap of 200000 rows. Only a trailing newline is removed from each
    line, so carriage returns must be preserved by the caller.
    """
    limit = DEFAULT_MAX_LINES if max_lines is None or max_lines < 0 else max_lines
    rows: Matrix = []
    for line in stream:
        if len(rows) >= limit:
            break
        rows.append(parse_datapoint(line.rstrip("\n")))
    return rows


def no_format_needed(current: Sequence[float], last: Sequence[float]) -> Vector:
    """Return the current datapoint unchanged."""
    return list(current)


def format_expected_output_audusd(current: Sequence[float], last: Sequence[float]) -> Vector:
    """Build the five-value target: the four current values and the close change.

    The last entry is the relative change of the close price from ``last`` to
    ``current``. The current values are copied only when there are exactly four.
    """
    size = len(current)
    if size < 2 or size >= 5:
        raise ShapeMismatchError(f"expected fewer than 5 and at least 2 values, got {size}")
    if len(last) < size:
        raise ShapeMismatchError("previous datapoint is shorter than the current one")
    result = [0.0] * 5
    if size == 4:
        result[:4] = current
    result[size] = current[size - 2] / last[size - 2] - 1
    return result


def add(a: Sequence, b: Sequence) -> list:
    """Element-wise sum of two vectors or two matrices."""
    if _is_matrix(a) or _is_matrix(b):
        if len(a) != len(b):
            raise ShapeMismatchError("matrix sizes do not match for addition")
        return [add(row_a, row_b) for row_a, row_b in zip(a, b)]
    if len(a) != len(b):
        raise ShapeMismatchError("vector sizes do not match for addition")
    return [x + y for x, y in zip(a, b)]


def subtract(a: Sequence, b: Sequence) -> list:
    """Element-wise difference ``a - b`` of two vectors or two matrices."""
    if _is_matrix(a) or _is_matrix(b):
        if len(a) != len(b):
            raise ShapeMismatchError("matrix sizes do not match for subtraction")
        return [subtract(row_a, row_b) for row_a, row_b in zip(a, b)]
    if len(a) != len(b):
        raise ShapeMismatchError("vector sizes do not match for subtraction")
    return [x - y for x, y in zip(a, b)]


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of two vectors of equal length."""
    if len(a) != len(b):
        raise ShapeMismatchError("vector sizes do not match for dot product")
    return sum(x * y for x, y in zip(a, b))


def outer_product(a: Sequence[float], b: Sequence[float]) -> Matrix:
    """Outer product: entry ``[i][j]`` is ``a[i] * b[j]``."""
    return [[x * y for y in b] for x in a]


def scalar_multiply(scalar: float, value: Sequence) -> list:
    """Multiply every entry of a vector or matrix by ``scalar``."""
    if _is_matrix(value):
        return [[scalar * x for x in row] for row in value]
    return [scalar * x for x in value]


def matrix_vector_multiply(matrix: Sequence[Sequence[float]], vector: Sequence[float]) -> Vector:
    """Product of a matrix with a column vector."""
    if not matrix or len(matrix[0]) != len(vector):
        raise ShapeMismatchError("matrix/vector sizes do not match for multiplication")
    return [dot_product(row, vector) for row in matrix]


def vector_matrix_multiply(vector: Sequence[float], matrix: Sequence[Sequence[float]]) -> Vector:
    """Scale each column sum of ``matrix`` by the matching entry of ``vector``.

    The vector's length must equal the number of columns.
    """
    if not matrix or len(matrix[0]) != len(vector):
        raise ShapeMismatchError("vector/matrix sizes do not match for multiplication")
    return [vector[j] * sum(row[j] for row in matrix) for j in range(len(matrix[0]))]


def transpose(matrix: Sequence[Sequence[float]]) -> Matrix:
    """Transpose a rectangular matrix."""
    if not matrix:
        return []
    return [list(column) for column in zip(*matrix)]


def transpose_layers(layers: Sequence[Sequence[Sequence[float]]]) -> Layers:
    """Transpose every matrix in a list of matrices."""
    if not layers or not layers[0]:
        return []
    return [transpose(layer) for layer in layers]


def extract_biases(weights: Layers) -> Matrix:
    """Return the bias (first entry) of every neuron, layer by layer."""
    return [[neuron[0] for neuron in layer] for layer in weights]


def extract_weights(weights: Layers) -> Layers:
    """Return every neuron's input weights without its bias."""
    return [[list(neuron[1:]) for neuron in layer] for layer in weights]


def inject_biases(weights: Layers, biases: Sequence[Sequence[float]]) -> None:
    """Overwrite the bias of every neuron in ``weights`` in place."""
    for layer, layer_biases in zip(weights, biases):
        for neuron, bias in zip(layer, layer_biases):
            neuron[0] = bias


def inject_weights(weights: Layers, extracted: Sequence[Sequence[Sequence[float]]]) -> None:
    """Overwrite the input weights of every neuron in ``weights`` in place."""
    for layer, extracted_layer in zip(weights, extracted):
        for neuron, new_weights in zip(layer, extracted_layer):
            count = len(neuron) - 1
            if len(new_weights) < count:
                raise ShapeMismatchError("not enough weights to inject")
            neuron[1:] = new_weights[:count]


def weighted_sum(outside: Sequence[float], inside: Sequence[float]) -> float:
    """Activate one neuron: sigmoid of its bias plus its weighted inputs."""
    if len(outside) != len(inside) - 1:
        raise ShapeMismatchError(
            f"sizes do not match for weighted sum: {len(outside)}, {len(inside)}"
        )
    total = inside[0] + sum(x * w for x, w in zip(outside, inside[1:]))
    return sigmoid(total)


def weighted_sums(outside: Sequence[float], inside: Sequence[Sequence[float]]) -> Vector:
    """Activate every neuron of one layer."""
    return [weighted_sum(outside, neuron) for neuron in inside]


def layer_outputs(inputs: Sequence[float], weights: Layers) -> Matrix:
    """Run the network and return the outputs of every layer."""
    outputs: Matrix = []
    current = list(inputs)
    for layer in weights:
        current = weighted_sums(current, layer)
        outputs.append(current)
    return outputs


def network_run_sum(inputs: Sequence[float], weights: Layers) -> Vector:
    """Run the network and return only the final layer's outputs."""
    value = list(inputs)
    for layer in weights:
        value = weighted_sums(value, layer)
    return value


def _trunc_divmod(a: int, b: int) -> tuple:
    quotient = abs(a) // b
    if a < 0:
        quotient = -quotient
    return quotient, a - quotient * b


def millis_to_string(milliseconds: Union[int, float]) -> str:
    """Format a duration as ``[Hh:][Mm:]Ss:MSms``."""
    if isinstance(milliseconds, float):
        seconds = math.trunc(milliseconds / 1000)
        millis = math.trunc(math.fmod(milliseconds, 1000))
    else:
        seconds, millis = _trunc_divmod(milliseconds, 1000)
    minutes, seconds = _trunc_divmod(seconds, 60)
    hours, minutes = _trunc_divmod(minutes, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h:")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m:")
    parts.append(f"{seconds}s:")
    parts.append(f"{millis}ms")
    return "".join(parts)


def sum_first(values: Sequence[int], limit: int) -> int:
    """Sum of the first ``limit`` values."""
    return sum(values[:max(limit, 0)])


def max_value(values: Iterable[int]) -> int:
    """Largest value, never less than zero."""
    return max(0, max(values, default=0))