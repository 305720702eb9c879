"""Submission schemas.

Field names are camelCase on the wire.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from postgate.db.models.post import PostStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PostResponse(CamelModel):
    id: int
    content: str
    source: Optional[str]
    status: PostStatus
    callback_url: str
    created_at: datetime
    approved_at: Optional[datetime]
    posted_at: Optional[datetime]


class SubmissionAccepted(CamelModel):
    id: int
    status: PostStatus
    created_at: datetime


class ApprovedPost(CamelModel):
    id: int
    status: PostStatus
    approved_at: Optional[datetime]


class RejectedPost(CamelModel):
    id: int
    status: PostStatus


class PostedPost(CamelModel):
    id: int
    status: PostStatus
    posted_at: Optional[datetime]


class StatsSummary(BaseModel):
    pending: int
    approved: int
    rejected: int
    posted: int
    total: int


def dump(model: BaseModel) -> dict:
    """Serialize a schema with its camelCase aliases."""
    return model.model_dump(by_alias=True, mode="json")
