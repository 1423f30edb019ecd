"""Translate the comments of C-family source files while preserving the code."""

__version__ = "1.0.0"
