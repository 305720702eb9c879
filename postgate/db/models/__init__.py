"""Database models for PostGate."""

from postgate.db.models.post import Post, PostStatus
from postgate.db.models.setting import Setting

__all__ = [
    "Post",
    "PostStatus",
    "Setting",
]
