"""Feed-forward sigmoid neural network, trainer and command for tab-separated price data."""

__version__ = "0.1.0"
__all__ = ["mathops", "network", "trainer", "cli"]