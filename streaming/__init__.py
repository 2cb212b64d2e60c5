"""Countdown sequences with model-written captions for live streams."""

from streaming.version import __version__

__all__ = ["__version__"]
