"""Record store for content submissions.

Thin persistence layer over the ``posts`` table. Transition writes are
conditional on the expected current status so that two concurrent
decisions on the same record cannot both succeed.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from postgate.db.models.post import Post, PostStatus


class PostStore:
    """Create, read, update and delete submissions."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, content: str, callback_url: str, source: Optional[str] = None) -> Post:
        post = Post(
            content=content,
            source=source,
            callback_url=callback_url,
            status=PostStatus.PENDING,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def get(self, post_id: int) -> Optional[Post]:
        return self.db.query(Post).filter(Post.id == post_id).first()

    def list(
        self,
        *,
        status: Optional[PostStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Post], int]:
        """Return one page of submissions, newest first, with the total match count."""
        query = self.db.query(Post)
        if status:
            query = query.filter(Post.status == status)

        total = query.count()
        posts = (
            query.order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return posts, total

    def count_by_status(self) -> Dict[PostStatus, int]:
        rows = self.db.query(Post.status, func.count(Post.id)).group_by(Post.status).all()
        counts = {status: 0 for status in PostStatus}
        for status, count in rows:
            counts[PostStatus(status)] = count
        return counts

    def update_if_status(self, post_id: int, expected: PostStatus, values: Dict[str, Any]) -> bool:
        """
        Apply ``values`` only if the record is still in ``expected`` status.

        Returns:
            True if a row was updated and committed
        """
        updated = (
            self.db.query(Post)
            .filter(Post.id == post_id, Post.status == expected)
            .update(values, synchronize_session=False)
        )
        if not updated:
            self.db.rollback()
            return False
        self.db.commit()
        return True

    def refresh(self, post: Post) -> Post:
        self.db.refresh(post)
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.commit()
