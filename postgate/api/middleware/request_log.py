"""Request logging middleware.

One log line per API request: request id, method, path, status, duration
and client address. The id is taken from an incoming ``X-Request-ID``
header when present, exposed as ``request.state.request_id`` and echoed
back on the response.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes and docs are not logged
EXCLUDED_PREFIXES = ("/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico")


def is_excluded(path: str) -> bool:
    return path.startswith(EXCLUDED_PREFIXES)


def get_client_ip(request: Request) -> str:
    """Client address, preferring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # First hop is the client
        return forwarded.split(",")[0].strip()
    if request.headers.get("x-real-ip"):
        return request.headers["x-real-ip"]
    return request.client.host if request.client else "unknown"


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs each request once its response is ready."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if is_excluded(request.url.path):
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            level_for_status(response.status_code),
            f"[{request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {elapsed_ms:.0f}ms client={get_client_ip(request)}",
        )
        return response
