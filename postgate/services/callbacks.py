"""Approval callback delivery.

On approval the downstream workflow is told to proceed by a single POST to
the callback URL stored with the submission. Delivery is at-most-once:
failures are logged and never retried.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from postgate.core.config import Settings, get_settings
from postgate.core.exceptions import DispatchFailure
from postgate.db.models.post import PostStatus
from postgate.services.webhooks import post_json

logger = logging.getLogger(__name__)


def build_approval_payload(post_id: int, content: str) -> Dict[str, Any]:
    """Body sent to the callback URL."""
    return {
        "id": post_id,
        "status": PostStatus.APPROVED.value,
        "content": content,
    }


class CallbackDispatcher:
    """Sends the approval callback for a submission."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    async def send_approval(self, post_id: int, content: str, callback_url: str) -> bool:
        """
        Deliver the approval payload to ``callback_url``.

        Returns:
            True if the callback answered 2xx, False otherwise
        """
        payload = build_approval_payload(post_id, content)
        try:
            await post_json(
                callback_url,
                payload,
                timeout=self.settings.webhook_timeout,
                transport=self.transport,
            )
        except DispatchFailure as e:
            logger.error(f"Approval callback for post {post_id} failed: {e.message}")
            return False

        logger.info(f"Approval callback for post {post_id} delivered to {callback_url}")
        return True
