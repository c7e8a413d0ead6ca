"""Command line entry point that loads price data, trains and saves weights."""

from __future__ import annotations

import argparse
import math
import sys
from typing import List, Optional, Sequence

from fxnet.mathops import format_audusd_data, format_expected_output_audusd
from fxnet.trainer import NetworkTrainer

DEFAULT_DATA = "Data/Stock/AUDUSD/Data15M.csv"
DEFAULT_WEIGHTS = "WeightsSaves/WeightsRCT.fbp"
DEFAULT_LAYERS = "350,200,135,90,60,20,5"


def next_power_of_two(n: int) -> int:
    """Smallest power of two that is at least ``n``."""
    if n <= 0:
        raise ValueError("n must be positive")
    return int(math.pow(2, math.ceil(math.log2(n))))


def _layer_sizes(text: str) -> List[int]:
    try:
        sizes = [int(piece) for piece in text.split(",") if piece.strip()]
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid layer sizes: {text!r}") from err
    if not sizes or any(size <= 0 for size in sizes):
        raise argparse.ArgumentTypeError(f"invalid layer sizes: {text!r}")
    return sizes


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fxnet", description="Train a network on tab separated price data."
    )
    parser.add_argument("--data", default=DEFAULT_DATA, help="price data file")
    parser.add_argument("--save", default=DEFAULT_WEIGHTS, help="existing file for the weights")
    parser.add_argument("--layers", type=_layer_sizes, default=_layer_sizes(DEFAULT_LAYERS))
    parser.add_argument("--inputs", type=int, default=20)
    parser.add_argument("--datapoints", type=int, default=100000)
    parser.add_argument("--epochs", type=int, default=50)
    parser.add_argument("--learning-rate", type=float, default=0.02)
    parser.add_argument("--print-after", type=int, default=25)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a full training session; return the exit status."""
    args = _parser().parse_args(argv)
    try:
        trainer = NetworkTrainer(args.inputs, args.layers)
        trainer.load(args.data, format_audusd_data, next_power_of_two(args.datapoints))
        trainer.train(
            format_expected_output_audusd,
            args.epochs,
            args.learning_rate,
            args.datapoints,
            args.print_after,
        )
        trainer.save_weights(args.save)
    except (OSError, ValueError, RuntimeError) as err:
        print(f"fxnet: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())