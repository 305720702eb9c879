"""Approval service for managing submission workflows.

Provides the high-level API over the approval state machine: persistence
through ``PostStore``, the approval callback, and reviewer notifications.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from postgate.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from postgate.core.store import PostStore
from postgate.core.tasks import TaskDispatcher
from postgate.db.models.post import Post, PostStatus
from postgate.services.callbacks import CallbackDispatcher
from postgate.services.notifications import NotificationDispatcher

from .machine import conflict_message, ensure_transition
from .states import ApprovalTransition, parse_status

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class ApprovalService:
    """
    High-level service for managing submissions.

    Handles:
    - Accepting submissions and announcing them to the reviewer
    - Approve / reject / confirm-posted transitions
    - Sending the approval callback
    - Listing, lookup, deletion and statistics
    """

    def __init__(
        self,
        db: Session,
        *,
        notifier: NotificationDispatcher,
        callbacks: CallbackDispatcher,
        tasks: TaskDispatcher,
    ):
        """
        Initialize the approval service.

        Args:
            db: Database session
            notifier: Reviewer notification dispatcher
            callbacks: Approval callback dispatcher
            tasks: Scheduler for fire-and-forget notifications
        """
        self.store = PostStore(db)
        self.notifier = notifier
        self.callbacks = callbacks
        self.tasks = tasks

    def submit(self, content: Any, callback_url: Any, source: Any = None) -> Post:
        """
        Accept a new submission in PENDING state.

        Raises:
            ValidationError: If content or callback_url is missing or not a string
        """
        if not content or not isinstance(content, str):
            raise ValidationError("Content is required and must be a string")
        if not callback_url or not isinstance(callback_url, str):
            raise ValidationError("callbackUrl is required and must be a string")
        if source is not None and not isinstance(source, str):
            raise ValidationError("Source must be a string")

        post = self.store.create(content, callback_url, source=source or None)
        logger.info(f"Accepted post {post.id} from source {post.source or 'unknown'}")

        self.tasks.dispatch(self.notifier.notify_pending, post.id, post.content, post.source)
        return post

    async def approve(self, post_id: int) -> Post:
        """
        Approve a pending submission and notify the downstream workflow.

        The transition is committed before the callback is sent; a failed
        callback is logged and does not undo it.

        Raises:
            NotFoundError: If no submission matches
            InvalidStateError: If the submission is not PENDING
        """
        post = self._transition(post_id, ApprovalTransition.APPROVE)

        delivered = await self.callbacks.send_approval(post.id, post.content, post.callback_url)
        if not delivered:
            logger.warning(f"Post {post.id} approved but its callback was not delivered")

        self.tasks.dispatch(self.notifier.notify_status, post.id, PostStatus.APPROVED, post.content)
        return post

    def reject(self, post_id: int) -> Post:
        """
        Reject a pending submission. No callback is sent.

        Raises:
            NotFoundError: If no submission matches
            InvalidStateError: If the submission is not PENDING
        """
        post = self._transition(post_id, ApprovalTransition.REJECT)
        self.tasks.dispatch(self.notifier.notify_status, post.id, PostStatus.REJECTED, post.content)
        return post

    def confirm_posted(self, post_id: int) -> Post:
        """
        Record that the downstream workflow published an approved submission.

        Raises:
            NotFoundError: If no submission matches
            InvalidStateError: If the submission is not APPROVED
        """
        post = self._transition(post_id, ApprovalTransition.CONFIRM_POSTED)
        self.tasks.dispatch(self.notifier.notify_status, post.id, PostStatus.POSTED, post.content)
        return post

    def get(self, post_id: int) -> Post:
        post = self.store.get(post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    def list(
        self,
        *,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        List submissions, newest first.

        ``limit`` defaults to 50 and is capped at 100; ``offset`` defaults to 0.

        Returns:
            Dictionary with ``items``, ``total``, ``limit`` and ``offset``
        """
        status_filter = parse_status(status) if status else None
        limit = min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        if limit < 1:
            limit = DEFAULT_PAGE_SIZE
        offset = max(offset or 0, 0)

        items, total = self.store.list(status=status_filter, limit=limit, offset=offset)
        return {"items": items, "total": total, "limit": limit, "offset": offset}

    def delete(self, post_id: int) -> None:
        post = self.get(post_id)
        self.store.delete(post)
        logger.info(f"Deleted post {post_id}")

    def stats(self) -> Dict[str, int]:
        """Count of submissions per status, plus the total."""
        counts = self.store.count_by_status()
        summary = {status.value.lower(): counts[status] for status in PostStatus}
        summary["total"] = sum(counts.values())
        return summary

    def _transition(self, post_id: int, transition: ApprovalTransition) -> Post:
        """Guard, then apply, a transition; returns the refreshed record."""
        post = self.get(post_id)
        rule = ensure_transition(PostStatus(post.status), transition)

        values: Dict[str, Any] = {"status": rule.to_state}
        if rule.timestamp_field:
            values[rule.timestamp_field] = datetime.utcnow()

        if not self.store.update_if_status(post.id, rule.from_state, values):
            # Another request moved the record since it was read
            current = self.store.refresh(post)
            raise InvalidStateError(
                conflict_message(transition, PostStatus(current.status)),
                current_status=PostStatus(current.status).value,
            )

        post = self.store.refresh(post)
        logger.info(f"Post {post.id}: {rule.from_state.value} -> {rule.to_state.value}")
        return post
