"""Tests for the approval service."""

import asyncio
import json

import httpx
import pytest

from postgate.core.approval import ApprovalService
from postgate.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from postgate.db.models.post import Post, PostStatus
from postgate.services.callbacks import CallbackDispatcher
from tests.helpers import RecordingTransport

CALLBACK_URL = "https://cb.example/x"


def submit(service: ApprovalService, content: str = "Hello", **kwargs) -> Post:
    return service.submit(content, kwargs.pop("callback_url", CALLBACK_URL), **kwargs)


class TestSubmit:

    def test_creates_pending_post(self, approval_service):
        post = submit(approval_service, source="newsletter")

        assert post.id is not None
        assert post.status == PostStatus.PENDING
        assert post.source == "newsletter"
        assert post.callback_url == CALLBACK_URL
        assert post.created_at is not None
        assert post.approved_at is None
        assert post.posted_at is None

    def test_ids_are_unique_and_increasing(self, approval_service):
        ids = [submit(approval_service, f"post {i}").id for i in range(5)]
        assert len(set(ids)) == 5
        assert ids == sorted(ids)

    def test_schedules_pending_notification(self, approval_service, task_recorder):
        post = submit(approval_service, source="rss")

        assert task_recorder.names == ["notify_pending"]
        _, args, _ = task_recorder.tasks[0]
        assert args == (post.id, "Hello", "rss")

    @pytest.mark.parametrize("content", ["", None, 42, ["a"]])
    def test_rejects_invalid_content(self, approval_service, task_recorder, content):
        with pytest.raises(ValidationError) as exc_info:
            approval_service.submit(content, CALLBACK_URL)
        assert "Content" in exc_info.value.message
        assert task_recorder.tasks == []

    @pytest.mark.parametrize("callback_url", ["", None, 7])
    def test_rejects_invalid_callback_url(self, approval_service, callback_url):
        with pytest.raises(ValidationError) as exc_info:
            approval_service.submit("Hello", callback_url)
        assert "callbackUrl" in exc_info.value.message

    def test_empty_source_is_stored_as_null(self, approval_service):
        assert submit(approval_service, source="").source is None


class TestApprove:

    def test_approve_sets_status_and_timestamp(self, approval_service):
        post = submit(approval_service)

        approved = asyncio.run(approval_service.approve(post.id))

        assert approved.status == PostStatus.APPROVED
        assert approved.approved_at is not None
        assert approved.approved_at >= approved.created_at
        assert approved.posted_at is None

    def test_approve_sends_callback(self, approval_service, callback_transport):
        post = submit(approval_service)

        asyncio.run(approval_service.approve(post.id))

        assert len(callback_transport.requests) == 1
        request = callback_transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == CALLBACK_URL
        assert json.loads(request.content) == {"id": post.id, "status": "APPROVED", "content": "Hello"}

    def test_approve_schedules_status_update(self, approval_service, task_recorder):
        post = submit(approval_service)
        asyncio.run(approval_service.approve(post.id))

        assert task_recorder.names == ["notify_pending", "notify_status"]
        _, args, _ = task_recorder.tasks[1]
        assert args == (post.id, PostStatus.APPROVED, "Hello")

    @pytest.mark.parametrize("transport", [
        RecordingTransport(status_code=500),
        RecordingTransport(error=httpx.ConnectError("connection refused")),
    ])
    def test_callback_failure_keeps_approval(self, db_session, notifier, app_settings, task_recorder, transport):
        service = ApprovalService(
            db_session,
            notifier=notifier,
            callbacks=CallbackDispatcher(app_settings, transport=transport.transport),
            tasks=task_recorder,
        )
        post = submit(service)

        approved = asyncio.run(service.approve(post.id))

        assert approved.status == PostStatus.APPROVED
        assert len(transport.requests) == 1
        db_session.expire_all()
        assert db_session.get(Post, post.id).status == PostStatus.APPROVED

    def test_double_approve_fails(self, approval_service, callback_transport):
        post = submit(approval_service)
        asyncio.run(approval_service.approve(post.id))

        with pytest.raises(InvalidStateError) as exc_info:
            asyncio.run(approval_service.approve(post.id))

        assert "approved" in exc_info.value.message
        assert len(callback_transport.requests) == 1

    def test_approve_unknown_post(self, approval_service):
        with pytest.raises(NotFoundError):
            asyncio.run(approval_service.approve(999))


class TestReject:

    def test_reject_pending(self, approval_service, callback_transport, task_recorder):
        post = submit(approval_service)

        rejected = approval_service.reject(post.id)

        assert rejected.status == PostStatus.REJECTED
        assert rejected.approved_at is None
        assert callback_transport.requests == []
        assert task_recorder.names[-1] == "notify_status"

    def test_reject_after_approve_fails(self, approval_service):
        post = submit(approval_service)
        asyncio.run(approval_service.approve(post.id))

        with pytest.raises(InvalidStateError) as exc_info:
            approval_service.reject(post.id)
        assert exc_info.value.message == "This post has already been approved."

    def test_reject_unknown_post(self, approval_service):
        with pytest.raises(NotFoundError):
            approval_service.reject(404)


class TestConfirmPosted:

    def test_confirm_after_approve(self, approval_service):
        post = submit(approval_service)
        asyncio.run(approval_service.approve(post.id))

        posted = approval_service.confirm_posted(post.id)

        assert posted.status == PostStatus.POSTED
        assert posted.posted_at is not None
        assert posted.posted_at >= posted.approved_at
        assert posted.approved_at is not None

    def test_confirm_before_approve_fails(self, approval_service):
        post = submit(approval_service)

        with pytest.raises(InvalidStateError) as exc_info:
            approval_service.confirm_posted(post.id)

        assert "Current status: PENDING" in exc_info.value.message
        assert approval_service.get(post.id).status == PostStatus.PENDING

    def test_confirm_after_reject_fails(self, approval_service):
        post = submit(approval_service)
        approval_service.reject(post.id)

        with pytest.raises(InvalidStateError) as exc_info:
            approval_service.confirm_posted(post.id)
        assert exc_info.value.current_status == "REJECTED"

    def test_confirm_twice_fails(self, approval_service):
        post = submit(approval_service)
        asyncio.run(approval_service.approve(post.id))
        approval_service.confirm_posted(post.id)

        with pytest.raises(InvalidStateError):
            approval_service.confirm_posted(post.id)

    def test_confirm_unknown_post(self, approval_service):
        with pytest.raises(NotFoundError):
            approval_service.confirm_posted(12345)


class TestConcurrentTransition:

    def test_stale_read_is_rejected(self, approval_service, session_factory):
        """A decision committed elsewhere between read and write wins."""
        post = submit(approval_service)
        approval_service.get(post.id)  # load into the service's session

        other = session_factory()
        try:
            other.query(Post).filter(Post.id == post.id).update({"status": PostStatus.REJECTED})
            other.commit()
        finally:
            other.close()

        updated = approval_service.store.update_if_status(
            post.id, PostStatus.PENDING, {"status": PostStatus.APPROVED}
        )
        assert updated is False


class TestQueries:

    def test_get_unknown(self, approval_service):
        with pytest.raises(NotFoundError) as exc_info:
            approval_service.get(1)
        assert exc_info.value.message == "Post not found"

    def test_list_newest_first(self, approval_service):
        ids = [submit(approval_service, f"post {i}").id for i in range(3)]

        result = approval_service.list()

        assert [p.id for p in result["items"]] == list(reversed(ids))
        assert result["total"] == 3
        assert result["limit"] == 50
        assert result["offset"] == 0

    def test_list_filters_by_status(self, approval_service):
        first = submit(approval_service, "one")
        submit(approval_service, "two")
        third = submit(approval_service, "three")
        approval_service.reject(first.id)
        approval_service.reject(third.id)

        result = approval_service.list(status="rejected")

        assert [p.id for p in result["items"]] == [third.id, first.id]
        assert all(p.status == PostStatus.REJECTED for p in result["items"])
        assert result["total"] == 2

    def test_list_unknown_status(self, approval_service):
        with pytest.raises(ValidationError):
            approval_service.list(status="draft")

    @pytest.mark.parametrize("limit,expected", [(500, 100), (100, 100), (10, 10), (0, 50), (-3, 50), (None, 50)])
    def test_list_limit_clamped(self, approval_service, limit, expected):
        assert approval_service.list(limit=limit)["limit"] == expected

    def test_list_offset(self, approval_service):
        ids = [submit(approval_service, f"post {i}").id for i in range(5)]

        result = approval_service.list(limit=2, offset=2)

        assert [p.id for p in result["items"]] == [ids[2], ids[1]]
        assert result["total"] == 5

    def test_negative_offset_treated_as_zero(self, approval_service):
        submit(approval_service)
        assert approval_service.list(offset=-10)["offset"] == 0

    def test_delete(self, approval_service):
        post = submit(approval_service)

        approval_service.delete(post.id)

        with pytest.raises(NotFoundError):
            approval_service.get(post.id)

    def test_delete_unknown(self, approval_service):
        with pytest.raises(NotFoundError):
            approval_service.delete(77)

    def test_stats(self, approval_service):
        posts = [submit(approval_service, f"post {i}") for i in range(5)]
        asyncio.run(approval_service.approve(posts[0].id))
        asyncio.run(approval_service.approve(posts[1].id))
        approval_service.confirm_posted(posts[1].id)
        approval_service.reject(posts[2].id)

        stats = approval_service.stats()

        assert stats == {"pending": 2, "approved": 1, "rejected": 1, "posted": 1, "total": 5}
        assert stats["total"] == stats["pending"] + stats["approved"] + stats["rejected"] + stats["posted"]

    def test_stats_empty(self, approval_service):
        assert approval_service.stats() == {"pending": 0, "approved": 0, "rejected": 0, "posted": 0, "total": 0}
