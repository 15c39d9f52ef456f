"""Recursively compute and verify checksums of directory trees."""

__version__ = "0.3.0"
