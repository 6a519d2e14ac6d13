"""Diskscope: find where disk space goes and reclaim it."""

__version__ = "0.1.0"
