"""Hourlog: daily work hours and workout tracking with swappable storage backends."""

__version__ = "0.1.0"
