"""Cooperative cancellation shared by an analysis run and its API calls."""

from __future__ import annotations

import threading

from .errors import AnalysisCancelled


class CancellationToken:
    """Thread-safe flag observed by every external call of one analysis run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``AnalysisCancelled`` once ``cancel`` has been called."""
        if self._event.is_set():
            raise AnalysisCancelled("Dependency freshness analysis was cancelled.")

    def wait(self, seconds: float) -> None:
        """Sleep up to ``seconds``, waking early and raising if cancelled."""
        self._event.wait(seconds)
        self.raise_if_cancelled()
