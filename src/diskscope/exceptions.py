"""Exception hierarchy."""

from __future__ import annotations


class DiskscopeError(Exception):
    """Base class for all diskscope errors."""


class ScanError(DiskscopeError):
    """The scan root is missing, not a directory, or unreadable."""


class ScanCancelled(DiskscopeError):
    """A running scan was aborted through its cancel token."""
