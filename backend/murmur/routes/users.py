"""
Murmur Backend — User Route Handlers
======================================

Routes (session required):
    GET  /api/secured/user/me                caller's profile
    GET  /api/secured/user/suggested         up to 5 users to follow
    GET  /api/secured/user/profile/{email}   someone's profile
    POST /api/secured/user/follow/{id}       follow / unfollow toggle
    PUT  /api/secured/user/update            partial profile update
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.database import get_db_session
from murmur.dependencies import get_current_user, get_media_store
from murmur.models.user import User
from murmur.schemas.common import ErrorResponse
from murmur.schemas.user import FollowResponse, UpdateUserRequest, UserProfileResponse, UserResponse
from murmur.services.media_base import MediaStore
from murmur.services.user_service import user_service

router = APIRouter(
    prefix="/api/secured/user",
    tags=["Users"],
    responses={401: {"description": "No valid session", "model": ErrorResponse}},
)


@router.get("/me", response_model=UserProfileResponse, summary="Current user's profile")
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    return await user_service.get_me(db, user)


@router.get("/suggested", response_model=List[UserResponse], summary="Users to follow")
async def get_suggested_users(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await user_service.get_suggested_users(db, user)


@router.get(
    "/profile/{email}",
    response_model=UserProfileResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Profile by email",
)
async def get_user_profile(
    email: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    return await user_service.get_user_profile(db, email)


@router.post(
    "/follow/{user_id}",
    response_model=FollowResponse,
    responses={
        400: {"description": "Cannot follow yourself", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Follow or unfollow a user",
)
async def follow_unfollow_user(
    user_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResponse:
    return await user_service.follow_unfollow_user(db, user, user_id)


@router.put(
    "/update",
    response_model=UserProfileResponse,
    responses={
        400: {"description": "Invalid input, wrong password or taken email", "model": ErrorResponse},
        502: {"description": "Media host unavailable", "model": ErrorResponse},
    },
    summary="Update the caller's profile",
)
async def update_user(
    body: UpdateUserRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    media: MediaStore = Depends(get_media_store),
) -> UserProfileResponse:
    return await user_service.update_user(db, media, user, body)
