"""Fire-and-forget task dispatch.

Side effects that must not hold up a request (notifications) are handed to
a ``TaskDispatcher``. Tasks are coroutines; ``run_logged`` awaits them and
logs any failure. Errors are never returned to the code that scheduled
the task.
"""

import logging
from typing import Any, Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

Task = Callable[..., Awaitable[Any]]


class TaskDispatcher(Protocol):
    """Schedules a coroutine function to run after the current request."""

    def dispatch(self, func: Task, *args: Any, **kwargs: Any) -> None:
        ...


async def run_logged(func: Task, *args: Any, **kwargs: Any) -> None:
    """Await ``func`` and log the outcome; never raises."""
    name = getattr(func, "__qualname__", repr(func))
    try:
        result = await func(*args, **kwargs)
    except Exception:
        logger.exception(f"Background task {name} failed")
        return

    if result is False:
        logger.warning(f"Background task {name} reported a failed delivery")


class BackgroundTaskDispatcher:
    """
    Dispatcher backed by Starlette's ``BackgroundTasks``.

    Tasks run once the response has been sent.
    """

    def __init__(self, background_tasks):
        self.background_tasks = background_tasks

    def dispatch(self, func: Task, *args: Any, **kwargs: Any) -> None:
        self.background_tasks.add_task(run_logged, func, *args, **kwargs)
