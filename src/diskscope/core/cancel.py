"""Cooperative cancellation for long-running traversals."""

from __future__ import annotations

import threading

from diskscope.exceptions import ScanCancelled


class CancelToken:
    """Thread-safe flag checked between directory visits and file reads."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelled("Scan cancelled")
