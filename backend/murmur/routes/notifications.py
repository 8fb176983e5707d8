"""
Murmur Backend — Notification Route Handlers
==============================================

Routes (session required):
    GET    /api/secured/notifications        list, newest first (no side effect)
    POST   /api/secured/notifications/read   mark all as read
    DELETE /api/secured/notifications        delete the caller's notifications
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.database import get_db_session
from murmur.dependencies import get_current_user
from murmur.models.user import User
from murmur.schemas.common import CountResponse, ErrorResponse
from murmur.schemas.notification import NotificationResponse
from murmur.services.notification_service import notification_service

router = APIRouter(
    prefix="/api/secured/notifications",
    tags=["Notifications"],
    responses={401: {"description": "No valid session", "model": ErrorResponse}},
)


@router.get("", response_model=List[NotificationResponse], summary="List notifications")
async def get_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NotificationResponse]:
    return await notification_service.get_notifications(db, user)


@router.post("/read", response_model=CountResponse, summary="Mark all notifications read")
async def mark_notifications_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CountResponse:
    return await notification_service.mark_all_read(db, user)


@router.delete("", response_model=CountResponse, summary="Delete all notifications")
async def delete_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CountResponse:
    return await notification_service.delete_notifications(db, user)
