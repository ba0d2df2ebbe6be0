"""Incremental, time-windowed Gmail reader."""

__version__ = "0.1.0"
