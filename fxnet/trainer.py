"""Sliding-window training of a network on rows of loaded market data."""

from __future__ import annotations

import math
import random
import sys
import time
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from typing import List, Optional

from fxnet.mathops import Matrix, Vector, millis_to_string
from fxnet.network import NeuralNetwork, PathLike

Parser = Callable[[Iterable[str], Optional[int]], Matrix]
ExpectedFormatter = Callable[[Sequence[float], Sequence[float]], Vector]

_CLEAR_LINE = "\x1b[1F\x1b[2K"
_BAR_WIDTH = 100

_rng = random.Random()


def _random_weight() -> float:
    return _rng.uniform(-1.0, 1.0)


def progress_bar(percent: float) -> str:
    """Render ``percent`` as text followed by a 100 character bar."""
    parts = [f"{percent:f}% "]
    filled = 0
    while filled <= percent:
        parts.append("█")
        filled += 1
    fraction = percent - int(percent)
    if fraction >= 0.75:
        parts.append("#")
        filled += 1
    elif fraction >= 0.5:
        parts.append("|")
        filled += 1
    elif fraction >= 0.25:
        parts.append("/")
        filled += 1
    parts.append("-" * max(_BAR_WIDTH - filled, 0))
    return "".join(parts)


class NetworkTrainer:
    """Owns a network and the data rows it is trained on.

    Each training sample joins consecutive data rows into one input vector;
    the target is built from the row that follows the window and the row
    before it.
    """

    def __init__(
        self,
        inputs: int,
        layers: Sequence[int],
        rand_func: Optional[Callable[[], float]] = None,
    ):
        self.inputs = inputs
        self.layers = list(layers)
        self.network = NeuralNetwork(inputs, self.layers, rand_func or _random_weight)
        self.data: Matrix = []

    def load(self, filename: PathLike, parser: Parser, max_lines: Optional[int] = None) -> None:
        """Read the data rows from ``filename`` with ``parser``."""
        print(f"Loading data from {filename}")
        with open(filename, encoding="utf-8", newline="") as stream:
            self.data = parser(stream, max_lines)
        print(f"Loaded {len(self.data)} Lines of data from {filename}")

    def _window(self, start: int, batches: int, width: int) -> Vector:
        values = [v for row in self.data[start:start + batches] for v in row[:width]]
        values = values[: self.inputs]
        return values + [0.0] * (self.inputs - len(values))

    def train(
        self,
        format_expected: ExpectedFormatter,
        epochs: int = 1000,
        learning_rate: float = 0.01,
        datapoints: int = 1000,
        print_after: int = -1,
    ) -> List[float]:
        """Train for ``epochs`` passes over ``datapoints`` samples.

        Returns the error recorded at every reporting step.
        """
        if not self.data:
            raise RuntimeError("no data loaded; load data before training")
        if datapoints <= 0 or datapoints > len(self.data):
            raise ValueError("Load more data.")
        width = len(self.data[0])
        batches = self.inputs // width if width else 0
        if batches < 1:
            raise ValueError("each data row is wider than the network input")
        if datapoints + batches > len(self.data):
            raise ValueError("Load more data.")
        if print_after < 0:
            print_after = 1

        self.network.alpha = learning_rate
        print(
            f"Training network with {epochs} epochs and learning rate {learning_rate:g} "
            f"and a data size of {len(self.data)}\n\n\n"
        )
        start = time.perf_counter()
        history: List[float] = []
        trend_window: deque = deque(maxlen=print_after)

        for epoch in range(epochs):
            epoch_start = time.perf_counter()
            self.network.alpha = learning_rate
            total_error = 0.0
            print(f"Epoch {epoch + 1}/{epochs}\n\n")
            last_error = 0.0
            for i in range(datapoints):
                inputs = self._window(i, batches, width)
                expected = format_expected(self.data[i + batches], self.data[i + batches - 1])
                current = self.network.learn(inputs, expected)
                total_error += current
                if math.isnan(current):
                    print(f"Error became nan at datapoint {i}", file=sys.stderr)
                if print_after and i % print_after == 0:
                    history.append(current)
                    self._report(
                        shown=i or 1,
                        epoch=epoch,
                        epochs=epochs,
                        datapoints=datapoints,
                        current=current,
                        trend=sum(trend_window),
                        start=start,
                        epoch_start=epoch_start,
                    )
                trend_window.append(current - last_error)
                last_error = current
            average = total_error / datapoints
            print(
                f"{_CLEAR_LINE * 3}Epoch {epoch + 1}/{epochs} complete, "
                f"Average Error: {average:g}"
            )
        return history

    @staticmethod
    def _report(
        *,
        shown: int,
        epoch: int,
        epochs: int,
        datapoints: int,
        current: float,
        trend: float,
        start: float,
        epoch_start: float,
    ) -> None:
        done = epoch * datapoints + shown
        percent = 100 * done / (epochs * datapoints)
        now = time.perf_counter()
        total_ms = int((now - start) * 1000)
        epoch_ms = int((now - epoch_start) * 1000)
        estimated_total = total_ms * epochs * datapoints // done
        remaining = estimated_total - total_ms
        print(
            f"{_CLEAR_LINE * 2}Datapoint {shown}/{datapoints}, \tCurrent Error: {current:g},"
            f"\tTrend: {trend:g}, \tTime for this epoch: {millis_to_string(epoch_ms)}, "
            f"\tTotal Time: {millis_to_string(total_ms)}, "
            f"\tEstimated Time left: {millis_to_string(remaining)}\n"
            f"{progress_bar(percent)}, \tEstimated Total Time: "
            f"{millis_to_string(estimated_total)}"
        )

    def save_weights(self, filename: PathLike) -> int:
        """Store the network's weights in an existing file; return the body length."""
        return self.network.save_weights(filename)

    def load_weights(self, filename: PathLike) -> None:
        """Replace the network's weights with those stored in ``filename``."""
        self.network.load_weights(filename)