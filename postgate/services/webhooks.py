"""Shared HTTP delivery for outbound webhooks."""

import logging
from typing import Any, Dict, Optional

import httpx

from postgate.core.exceptions import DispatchFailure

logger = logging.getLogger(__name__)


async def post_json(
    url: str,
    payload: Dict[str, Any],
    *,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """
    POST ``payload`` as JSON to ``url``.

    Raises:
        DispatchFailure: On a transport error or a non-2xx response
    """
    headers = {"Content-Type": "application/json"}
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise DispatchFailure(
            f"{url} answered {e.response.status_code}: {e.response.text[:200]}",
            target=url,
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        # InvalidURL is not an HTTPError subclass
        raise DispatchFailure(f"Request to {url} failed: {e}", target=url) from e

    logger.debug(f"Delivered webhook to {url} ({response.status_code})")
    return response
