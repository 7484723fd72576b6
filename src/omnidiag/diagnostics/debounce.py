"""Debounce manager for diagnostics validation.

Owns at most one pending validation per scope (a document URI, or the
whole project) and cancels superseded ones.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from omnidiag.analysis.cancellation import CancellationToken
from omnidiag.logging import get_logger

__all__ = [
    "PROJECT_SCOPE",
    "DebounceManager",
    "PendingValidation",
    "ValidationFunc",
    "ValidationState",
]

# Scope key for whole-project validations; never a valid document URI.
PROJECT_SCOPE = "<project>"

ValidationFunc = Callable[[CancellationToken], Awaitable[None]]


class ValidationState(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    FETCHING = "fetching"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PendingValidation:
    """One scheduled validation: its token, its task and where it is."""

    def __init__(self, scope: str) -> None:
        self.scope = scope
        self.token = CancellationToken()
        self.state = ValidationState.IDLE
        self.task: asyncio.Task[None] | None = None

    @property
    def is_live(self) -> bool:
        return self.state in (
            ValidationState.IDLE,
            ValidationState.SCHEDULED,
            ValidationState.FETCHING,
        )

    def cancel(self) -> bool:
        """Cancel the validation. Returns False if it had already finished."""
        if not self.is_live:
            return False
        self.state = ValidationState.CANCELLED
        self.token.cancel()
        if self.task is not None and not self.task.done():
            self.task.cancel()
        return True


class DebounceManager:
    """Manages debounced validation tasks per scope.

    Bookkeeping happens synchronously on the event loop thread, so one
    scope's cancellation never waits behind another scope's task.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._pending: dict[str, PendingValidation] = {}
        self._logger = logger if logger is not None else get_logger("diagnostics.debounce")

    def is_pending(self, scope: str) -> bool:
        pending = self._pending.get(scope)
        return pending is not None and pending.is_live

    def get(self, scope: str) -> PendingValidation | None:
        return self._pending.get(scope)

    async def schedule(
        self,
        scope: str,
        func: ValidationFunc,
        delay_ms: int = 750,
    ) -> PendingValidation:
        """
        Schedule a validation with debounce.

        Cancels any existing validation for the scope first.

        Args:
            scope: The document URI or PROJECT_SCOPE.
            func: Coroutine function performing fetch and write. It receives
                the validation's token and must check it before writing.
            delay_ms: Debounce delay in milliseconds.

        Returns:
            The new pending validation.
        """
        previous = self.discard(scope)
        pending = self._start(scope, func, delay_ms)
        if previous is not None:
            await _wait_unwound(previous)
        return pending

    async def schedule_if_idle(
        self,
        scope: str,
        func: ValidationFunc,
        delay_ms: int = 3000,
    ) -> PendingValidation | None:
        """Schedule only when nothing is pending for the scope.

        Returns:
            The new pending validation, or None if one was already pending.
        """
        if self.is_pending(scope):
            self._logger.debug("Validation for %s already pending", scope)
            return None
        return self._start(scope, func, delay_ms)

    def discard(self, scope: str) -> PendingValidation | None:
        """
        Cancel the scope's validation immediately and forget it.

        The token is cancelled before this returns, so the validation can no
        longer write.

        Returns:
            The cancelled validation, or None if nothing live was pending.
        """
        pending = self._pending.pop(scope, None)
        if pending is None or not pending.cancel():
            return None
        self._logger.debug("Cancelled validation for %s", scope)
        return pending

    async def cancel(self, scope: str) -> bool:
        """
        Cancel and discard any pending validation for the scope.

        Returns:
            True if a live validation was cancelled.
        """
        pending = self.discard(scope)
        if pending is None:
            return False
        await _wait_unwound(pending)
        return True

    def cancel_all(self) -> None:
        """Cancel every pending validation without waiting for them."""
        for pending in list(self._pending.values()):
            pending.cancel()
        self._pending.clear()

    def _start(
        self, scope: str, func: ValidationFunc, delay_ms: int
    ) -> PendingValidation:
        pending = PendingValidation(scope)
        pending.state = ValidationState.SCHEDULED
        pending.task = asyncio.create_task(self._debounced_call(pending, func, delay_ms))
        self._pending[scope] = pending
        self._logger.debug("Scheduled validation for %s in %d ms", scope, delay_ms)
        return pending

    async def _debounced_call(
        self, pending: PendingValidation, func: ValidationFunc, delay_ms: int
    ) -> None:
        """
        Call func after delay, handling cancellation and failures.

        Failures are logged at debug level; the previous diagnostics stay
        until the next successful validation.
        """
        try:
            await asyncio.sleep(delay_ms / 1000)
            if pending.token.is_cancelled:
                return
            pending.state = ValidationState.FETCHING
            await func(pending.token)
        except asyncio.CancelledError:
            pending.state = ValidationState.CANCELLED
            raise
        except Exception:
            self._logger.debug("Validation for %s failed", pending.scope, exc_info=True)
        finally:
            if pending.state is ValidationState.FETCHING:
                pending.state = ValidationState.COMPLETED
            if self._pending.get(pending.scope) is pending:
                del self._pending[pending.scope]


async def _wait_unwound(pending: PendingValidation) -> None:
    # Wait for the task to unwind without re-raising its cancellation.
    if pending.task is not None:
        await asyncio.wait({pending.task})
