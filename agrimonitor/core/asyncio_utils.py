"""Helpers for background tasks that must not fail silently."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Coroutine, Optional

from .logging_utils import LoggerLike, ensure_structured_logger


def log_task_errors(task: asyncio.Task[Any], *, logger: LoggerLike = None) -> asyncio.Task[Any]:
    """Log an exception raised by ``task`` as soon as it finishes.

    Otherwise asyncio only reports it as "Task exception was never
    retrieved" when the task is garbage collected.
    """
    task_logger = ensure_structured_logger(logger, fallback_name="tasks")

    def _report(done: asyncio.Task[Any]) -> None:
        if done.cancelled() or done.exception() is None:
            return
        task_logger.error("Task %s failed", done.get_name(), exc_info=done.exception())

    task.add_done_callback(_report)
    return task


def create_logged_task(
    coro: Coroutine[Any, Any, Any],
    *,
    logger: LoggerLike = None,
    name: Optional[str] = None,
) -> asyncio.Task[Any]:
    """Schedule ``coro`` as a named task whose failure gets logged."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    return log_task_errors(task, logger=logger)


async def cancel_and_wait(task: Optional[asyncio.Task[Any]]) -> None:
    """Cancel ``task`` and wait until it has actually finished."""
    if task is None or task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


__all__ = ["log_task_errors", "create_logged_task", "cancel_and_wait"]
