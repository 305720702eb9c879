"""Content submission model.

One row per submission received from the upstream workflow.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SAEnum

from postgate.db.base import Base


class PostStatus(str, Enum):
    """Lifecycle states of a submission."""

    PENDING = "PENDING"      # Awaiting a human decision
    APPROVED = "APPROVED"    # Approved, callback sent downstream
    REJECTED = "REJECTED"    # Rejected by the reviewer (terminal)
    POSTED = "POSTED"        # Downstream confirmed publication (terminal)


class Post(Base):
    """
    A submission awaiting or having undergone approval.

    ``approved_at`` is set only on the PENDING -> APPROVED transition and
    ``posted_at`` only on APPROVED -> POSTED.
    """
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    source = Column(String(255), nullable=True)

    status = Column(
        SAEnum(
            PostStatus,
            name="post_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=PostStatus.PENDING,
        index=True,
    )

    # Destination for the approval callback
    callback_url = Column(String(500), nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    approved_at = Column(DateTime, nullable=True)
    posted_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Post {self.id} [{self.status}]>"
