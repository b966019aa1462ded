"""
Pressroom Backend: Post SQLAlchemy Model
========================================

What:  ORM model for the `posts` table: the public feed of user-authored posts.

Ownership & voting:
    - owner_id is a foreign key to users.id, so a post can only be created for an
      existing user. Users are never deleted, so no ON DELETE behavior is needed.
    - title/content are editable by the owner only (see services/ownership.py).
    - likes/dislikes are public counters, only ever changed by
      `UPDATE posts SET likes = likes + 1`, never by read-modify-write in Python.

Query Patterns:
    - Feed: SELECT ... ORDER BY created_at ASC, joined with the owner's username
    - Single post: SELECT ... WHERE id = :uuid
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pressroom.database import Base
from pressroom.models.user import User

# Counter columns that the public vote endpoints may increment
COUNTER_FIELDS = ("likes", "dislikes")


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Joined eagerly: the feed always shows the author's username and async
    # sessions cannot lazy-load on attribute access
    owner: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_posts_likes_non_negative"),
        CheckConstraint("dislikes >= 0", name="ck_posts_dislikes_non_negative"),
        Index("idx_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, owner_id={self.owner_id}, "
            f"likes={self.likes}, dislikes={self.dislikes})>"
        )
