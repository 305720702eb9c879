"""Submission and approval API endpoints.

Approve and reject are plain GET links clicked from the reviewer's chat
client, so they answer with an HTML page unless the caller asks for JSON.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from postgate.api.deps import get_approval_service
from postgate.api.rendering import ActionOutcome, present
from postgate.api.schemas.common import Pagination, success_body
from postgate.api.schemas.posts import (
    ApprovedPost,
    PostedPost,
    PostResponse,
    RejectedPost,
    StatsSummary,
    SubmissionAccepted,
    dump,
)
from postgate.core.approval import ApprovalService
from postgate.core.config import get_settings
from postgate.core.exceptions import GatewayError, InternalError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

# Accepted spellings of the callback URL in submission bodies
CALLBACK_URL_FIELDS = ("callbackUrl", "callback_url", "n8n_callback_url")

# Ids are a 32-bit autoincrement column
MIN_POST_ID = 1
MAX_POST_ID = 2**31 - 1


def parse_post_id(raw: str) -> int:
    """Parse a path identifier; anything but an integer in the id column's range is rejected."""
    try:
        post_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid post ID")
    if not MIN_POST_ID <= post_id <= MAX_POST_ID:
        raise ValidationError("Invalid post ID")
    return post_id


def _callback_url(payload: Dict[str, Any]) -> Optional[Any]:
    for name in CALLBACK_URL_FIELDS:
        if payload.get(name) is not None:
            return payload[name]
    return None


@router.post("/submit", status_code=status.HTTP_202_ACCEPTED)
async def submit_post(
    payload: Any = Body(...),
    service: ApprovalService = Depends(get_approval_service),
):
    """Accept a submission from the upstream workflow."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    post = service.submit(
        payload.get("content"),
        _callback_url(payload),
        source=payload.get("source"),
    )
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=success_body(
            dump(SubmissionAccepted.model_validate(post)),
            message="Post submitted successfully and pending approval",
        ),
    )


@router.get("/stats/summary")
async def stats_summary(service: ApprovalService = Depends(get_approval_service)):
    """Count of submissions per status."""
    return success_body(StatsSummary(**service.stats()).model_dump())


@router.get("/{post_id}/approve")
async def approve_post(
    post_id: str,
    request: Request,
    service: ApprovalService = Depends(get_approval_service),
):
    """Approve a pending submission and fire the approval callback."""
    try:
        post = await service.approve(parse_post_id(post_id))
        outcome = ActionOutcome(
            status_code=status.HTTP_200_OK,
            title="Post Approved",
            message="Post approved and sent for posting",
            page_message="Post Approved. Pushing to LinkedIn.",
            data=dump(ApprovedPost.model_validate(post)),
        )
    except GatewayError as e:
        outcome = ActionOutcome.from_error(e)
    except Exception:
        logger.exception(f"Error approving post {post_id}")
        outcome = ActionOutcome.from_error(InternalError("Failed to approve post"))

    return present(request, outcome, get_settings().app_name)


@router.get("/{post_id}/reject")
async def reject_post(
    post_id: str,
    request: Request,
    service: ApprovalService = Depends(get_approval_service),
):
    """Reject a pending submission."""
    try:
        post = service.reject(parse_post_id(post_id))
        outcome = ActionOutcome(
            status_code=status.HTTP_200_OK,
            title="Post Rejected",
            message="Post rejected",
            page_message="Post Rejected. No action taken.",
            data=dump(RejectedPost.model_validate(post)),
        )
    except GatewayError as e:
        outcome = ActionOutcome.from_error(e)
    except Exception:
        logger.exception(f"Error rejecting post {post_id}")
        outcome = ActionOutcome.from_error(InternalError("Failed to reject post"))

    return present(request, outcome, get_settings().app_name)


@router.api_route("/{post_id}/posted", methods=["PUT", "POST"])
async def confirm_posted(
    post_id: str,
    service: ApprovalService = Depends(get_approval_service),
):
    """Confirmation from the downstream workflow that the post went out."""
    post = service.confirm_posted(parse_post_id(post_id))
    return success_body(
        dump(PostedPost.model_validate(post)),
        message="Post marked as posted successfully",
    )


@router.get("")
async def list_posts(
    service: ApprovalService = Depends(get_approval_service),
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50),
    offset: int = Query(0),
):
    """List submissions, newest first."""
    result = service.list(status=status_filter, limit=limit, offset=offset)
    return success_body(
        [dump(PostResponse.model_validate(p)) for p in result["items"]],
        pagination=Pagination(total=result["total"], limit=result["limit"], offset=result["offset"]),
    )


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    service: ApprovalService = Depends(get_approval_service),
):
    """Get a single submission."""
    post = service.get(parse_post_id(post_id))
    return success_body(dump(PostResponse.model_validate(post)))


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    service: ApprovalService = Depends(get_approval_service),
):
    """Delete a submission."""
    post_id_value = parse_post_id(post_id)
    service.delete(post_id_value)
    return success_body({"id": post_id_value}, message="Post deleted successfully")
