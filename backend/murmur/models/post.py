"""
Murmur Backend — Post, Comment and Like Models
================================================

What:  ORM models for `posts`, `comments` and `likes`.
Who:   Used by PostService; read by Alembic.

Table Design:
    - posts.text / posts.img are both nullable, but a CHECK constraint
      requires at least one of them (PostService normalises "" to NULL first).
    - posts.img holds the media host URL, never image bytes.
    - likes is a join table with one row per (user, post); presence = liked.
    - comments and likes reference posts with ON DELETE CASCADE, and
      PostService.delete_post() also removes them explicitly in the same
      transaction (SQLite does not enforce foreign keys by default).

Relationships are declared without eager loading; services request exactly
the graph they serialize with selectinload() options.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text as sql_text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from murmur.database import Base
from murmur.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """A post owned by exactly one user."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    img: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    user: Mapped[User] = relationship(User)
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post", order_by="Comment.created_at", passive_deletes=True
    )
    likes: Mapped[List["Like"]] = relationship(
        back_populates="post", order_by="Like.created_at", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("text IS NOT NULL OR img IS NOT NULL", name="ck_posts_text_or_img"),
        Index("idx_posts_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id})>"


class Comment(Base):
    """A text comment by `user_id` on `post_id`."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    user: Mapped[User] = relationship(User)
    post: Mapped[Post] = relationship(back_populates="comments")

    __table_args__ = (Index("idx_comments_post_id", "post_id"),)


class Like(Base):
    """`user_id` likes `post_id`."""

    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    post: Mapped[Post] = relationship(back_populates="likes")

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
        Index("idx_likes_post_id", "post_id"),
    )
