"""Error guard for LSP handlers."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from omnidiag.config import ConfigError


def guard_handler(
    *,
    logger: logging.Logger,
    method: str,
    default: Any = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that keeps a failing handler from reaching pygls.

    Works on plain and ``async`` handlers. Invalid client settings
    (``ConfigError``) are logged as a warning and the previous options stay
    in effect; any other exception is logged with its traceback. In both
    cases ``default`` is returned. Cancellation of an async handler is
    re-raised so pygls can tear it down.

    Args:
        logger: Logger for the failure.
        method: LSP method name, used in the log message.
        default: Result returned when the handler fails.
    """

    def report(exc: Exception) -> Any:
        if isinstance(exc, ConfigError):
            logger.warning("Ignoring invalid settings from %s: %s", method, exc)
        else:
            logger.error("Error in %s handler", method, exc_info=exc)
        return default

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    return report(exc)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                return report(exc)

        return wrapper

    return decorator
