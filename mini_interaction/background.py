"""Thread pool for handler work that continues after a deferred acknowledgement."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from contextvars import copy_context
from typing import Any, Callable

import structlog
from structlog.contextvars import bind_contextvars

logger = structlog.get_logger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="interaction")


def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("background_task_failed", error=str(exc), error_type=type(exc).__name__)


def run_async(
    func: Callable[..., Any],
    /,
    *args: Any,
    interaction_id: str | None = None,
    **kwargs: Any,
) -> Future:
    """Submit *func* to the shared pool, carrying the caller's structlog context.

    Failures stay available on the returned Future and are also logged, since
    nothing else waits on a deferred handler once the HTTP response is sent.
    """

    context = copy_context()
    if interaction_id is not None:
        context.run(bind_contextvars, interaction_id=interaction_id)

    def runner() -> Any:
        return context.run(func, *args, **kwargs)

    future = _executor.submit(runner)
    future.add_done_callback(lambda done: context.run(_log_failure, done))
    return future
