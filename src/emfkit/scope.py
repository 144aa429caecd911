"""Decorator that gives a function its own logger and flushes it on return."""

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from emfkit.core.logger import MetricsLogger
from emfkit.factory import create_metrics_logger

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _inject(fn: Callable[..., Any], kwargs: dict[str, Any], metrics: MetricsLogger) -> None:
    if "metrics" in inspect.signature(fn).parameters:
        kwargs["metrics"] = metrics


async def _flush(metrics: MetricsLogger) -> None:
    try:
        await metrics.flush()
    except Exception:
        logger.exception("Failed to flush metrics")


async def _flush_and_close(metrics: MetricsLogger) -> None:
    await _flush(metrics)
    # Connections must not outlive the loop asyncio.run() is about to close.
    try:
        environment = await metrics.resolve_environment()
        await environment.get_sink().close()
    except Exception:
        logger.exception("Failed to close metrics sink")


# Flushes scheduled from sync handlers called inside a running loop.
_pending_flushes: set[asyncio.Task[None]] = set()


def _flush_from_sync(metrics: MetricsLogger) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(_flush_and_close(metrics))
        return
    task = loop.create_task(_flush(metrics))
    _pending_flushes.add(task)
    task.add_done_callback(_pending_flushes.discard)


def metric_scope(fn: F) -> F:
    """Wrap a function so it records into a fresh MetricsLogger.

    The logger is passed as the ``metrics`` keyword argument when the function
    declares one, and is flushed after the function returns or raises. Flush
    failures are logged; exceptions from the function propagate. A plain
    function called while an event loop is running flushes in a task on that
    loop instead of blocking it.

    Works for both plain functions and coroutine functions:

        ```python
        @metric_scope
        async def handler(event, context, metrics):
            metrics.put_metric("Invocations", 1, "Count")
        ```
    """
    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            metrics = create_metrics_logger()
            _inject(fn, kwargs, metrics)
            try:
                return await fn(*args, **kwargs)
            finally:
                await _flush(metrics)

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        metrics = create_metrics_logger()
        _inject(fn, kwargs, metrics)
        try:
            return fn(*args, **kwargs)
        finally:
            _flush_from_sync(metrics)

    return wrapper  # type: ignore[return-value]
