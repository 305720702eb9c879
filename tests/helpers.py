"""Test doubles shared across the suite."""

from typing import Any, Callable, List, Optional, Tuple

import httpx


class RecordingTransport:
    """httpx mock transport that remembers every request it answers."""

    def __init__(self, status_code: int = 200, error: Optional[Exception] = None):
        self.status_code = status_code
        self.error = error
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text="ok" if self.status_code < 400 else "nope")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingTaskDispatcher:
    """Collects scheduled tasks instead of running them."""

    def __init__(self):
        self.tasks: List[Tuple[Callable, tuple, dict]] = []

    def dispatch(self, func, *args: Any, **kwargs: Any) -> None:
        self.tasks.append((func, args, kwargs))

    @property
    def names(self) -> List[str]:
        return [func.__name__ for func, _, _ in self.tasks]
