"""Cooperative cancellation shared by the scheduler and the server."""

from __future__ import annotations

from typing import Callable

from omnidiag.logging import get_logger

_logger = get_logger("analysis.cancellation")


class CancellationToken:
    """A one-shot cancellation flag with callbacks.

    The scheduler checks ``is_cancelled`` before every display write; a
    server implementation may register a callback to abort its transport
    request early.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                _logger.exception("Cancellation callback failed")

    def on_cancelled(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)
