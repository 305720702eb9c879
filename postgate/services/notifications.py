"""Reviewer notifications via a Discord webhook.

Handles:
- The pending-approval notice, with approve/reject links back into the API
- Status updates when a submission is approved, rejected or posted

Sends are best-effort. A missing destination, a non-2xx answer or a
transport error is logged and reported as ``False``; nothing is raised to
the caller.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from postgate.core.config import Settings, get_settings
from postgate.core.exceptions import DispatchFailure
from postgate.core.settings_store import SettingKey, SettingsStore
from postgate.db.models.post import PostStatus
from postgate.services.webhooks import post_json

logger = logging.getLogger(__name__)

PENDING_EXCERPT_LIMIT = 1000
STATUS_EXCERPT_LIMIT = 500

PENDING_COLOR = 0xFFA500

# Embed styling per status update
STATUS_TEMPLATES = {
    PostStatus.APPROVED: {"emoji": "✅", "color": 0x00FF00, "text": "Approved"},
    PostStatus.REJECTED: {"emoji": "❌", "color": 0xFF0000, "text": "Rejected"},
    PostStatus.POSTED: {"emoji": "🚀", "color": 0x0099FF, "text": "Posted to LinkedIn"},
}


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, ending in an ellipsis when cut."""
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def build_pending_message(
    post_id: int,
    content: str,
    app_url: str,
    source: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Embed announcing a new submission, with approve and reject links."""
    base = app_url.rstrip("/")
    approve_url = f"{base}/api/v1/posts/{post_id}/approve"
    reject_url = f"{base}/api/v1/posts/{post_id}/reject"

    fields: List[Dict[str, Any]] = []
    if source:
        fields.append({"name": "📁 Source", "value": source, "inline": True})
    fields.append({
        "name": "🔗 Actions",
        "value": f"[✅ Approve]({approve_url}) | [❌ Reject]({reject_url})",
        "inline": False,
    })

    footer = f"Post ID: {post_id}"
    if source:
        footer += f" | Source: {source}"

    embed = {
        "title": "📝 New Post Pending Approval",
        "description": truncate(content, PENDING_EXCERPT_LIMIT),
        "color": PENDING_COLOR,
        "fields": fields,
        "footer": {"text": footer},
        "timestamp": (timestamp or datetime.utcnow()).isoformat(),
    }
    return {"embeds": [embed]}


def build_status_message(
    post_id: int,
    status: PostStatus,
    content: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Embed announcing a status change."""
    template = STATUS_TEMPLATES[status]
    if content:
        description = truncate(content, STATUS_EXCERPT_LIMIT)
    else:
        description = f"Post #{post_id} has been {status.value.lower()}."

    embed = {
        "title": f"{template['emoji']} Post {template['text']}",
        "description": description,
        "color": template["color"],
        "footer": {"text": f"Post ID: {post_id}"},
        "timestamp": (timestamp or datetime.utcnow()).isoformat(),
    }
    return {"embeds": [embed]}


class NotificationDispatcher:
    """
    Sends reviewer notifications.

    Runs outside the request that triggered it, so it opens its own
    database session to resolve the destination webhook.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            session_factory: Callable returning a new database session
            settings: Application settings (defaults to the cached settings)
            transport: Optional httpx transport, used by tests
        """
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.transport = transport

    def resolve_webhook_url(self) -> Optional[str]:
        """Stored setting first, then the configured default.

        Runs a blocking query; async callers go through a worker thread.
        """
        db = self.session_factory()
        try:
            stored = SettingsStore(db).get(SettingKey.DISCORD_WEBHOOK_URL)
        finally:
            db.close()
        return stored or self.settings.discord_webhook_url or None

    async def notify_pending(self, post_id: int, content: str, source: Optional[str] = None) -> bool:
        """Announce a new submission awaiting approval."""
        webhook_url = await run_in_threadpool(self.resolve_webhook_url)
        if not webhook_url:
            logger.warning("Discord webhook URL not configured, skipping approval notification")
            return False

        message = build_pending_message(post_id, content, self.settings.app_url, source)
        return await self._send(webhook_url, message, f"approval notification for post {post_id}")

    async def notify_status(self, post_id: int, status: PostStatus, content: Optional[str] = None) -> bool:
        """Announce that a submission changed status."""
        status = PostStatus(status)
        webhook_url = await run_in_threadpool(self.resolve_webhook_url)
        if not webhook_url:
            logger.debug("Discord webhook URL not configured, skipping status update")
            return False

        message = build_status_message(post_id, status, content)
        return await self._send(webhook_url, message, f"{status.value.lower()} update for post {post_id}")

    async def _send(self, webhook_url: str, message: Dict[str, Any], description: str) -> bool:
        try:
            await post_json(
                webhook_url,
                message,
                timeout=self.settings.webhook_timeout,
                transport=self.transport,
            )
        except DispatchFailure as e:
            logger.error(f"Failed to send {description}: {e.message}")
            return False

        logger.info(f"Sent {description}")
        return True
