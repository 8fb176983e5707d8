"""
Murmur Backend — Notification Model
=====================================

What:  ORM model for the `notifications` table.
When:  A row is written alongside a new like (type=like) or a new follow
       edge (type=follow), in the same transaction as the triggering write.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from murmur.database import Base
from murmur.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationType(str, enum.Enum):
    LIKE = "like"
    FOLLOW = "follow"


class Notification(Base):
    """`from_user_id` did something (`type`) that concerns `to_user_id`."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Stored as the enum value ("like" / "follow")
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    from_user: Mapped[User] = relationship(User, foreign_keys=[from_user_id])

    __table_args__ = (
        Index("idx_notifications_to_user_created", "to_user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, type='{self.type}', "
            f"to_user_id={self.to_user_id}, read={self.read})>"
        )
