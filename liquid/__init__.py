"""Liquid templates: scanning, block parsing, expression evaluation and the standard filters."""

__version__ = "0.1.0"