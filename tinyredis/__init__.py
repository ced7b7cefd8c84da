"""A small in-memory key-value server speaking RESP, with its building blocks."""

__version__ = "0.1.0"