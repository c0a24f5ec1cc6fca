"""Analyze API: batch text tokenization over HTTP."""

__version__ = "1.0.0"
