"""
Murmur Backend — Notification Service
=======================================

What:  Read, mark-read and delete the caller's notifications.
How:   Notifications are written by PostService (likes) and UserService
       (follows); this service only consumes them. Every query is scoped to
       `to_user_id == caller`.
"""

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from murmur.exceptions import DatabaseError
from murmur.models.notification import Notification
from murmur.models.user import User
from murmur.schemas.common import CountResponse
from murmur.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:

    async def get_notifications(self, db: AsyncSession, user: User) -> List[NotificationResponse]:
        """Newest first, each with the sender's public fields. Read-only."""
        try:
            result = await db.execute(
                select(Notification)
                .where(Notification.to_user_id == user.id)
                .options(selectinload(Notification.from_user))
                .order_by(Notification.created_at.desc())
            )
            notifications = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notifications: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})
        return [NotificationResponse.model_validate(n) for n in notifications]

    async def mark_all_read(self, db: AsyncSession, user: User) -> CountResponse:
        try:
            result = await db.execute(
                update(Notification)
                .where(Notification.to_user_id == user.id, Notification.read.is_(False))
                .values(read=True)
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            logger.error("Failed to mark notifications read for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Marked %d notifications read for %s", result.rowcount, user.id)
        return CountResponse(message="Notifications marked as read", count=result.rowcount)

    async def delete_notifications(self, db: AsyncSession, user: User) -> CountResponse:
        """Deletes notifications addressed to the caller only."""
        try:
            result = await db.execute(
                delete(Notification)
                .where(Notification.to_user_id == user.id)
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            logger.error("Failed to delete notifications for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Deleted %d notifications for %s", result.rowcount, user.id)
        return CountResponse(message="Notifications deleted successfully", count=result.rowcount)


# ── Module-level singleton ────────────────────────────────────────────────
notification_service = NotificationService()
