"""Tail newline-delimited JSON log files as structured entries."""

__version__ = "0.1.0"
