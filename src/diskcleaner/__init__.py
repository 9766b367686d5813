"""Diskcleaner: classify, deduplicate and clean files in a directory tree."""

__version__ = "0.1.0"
