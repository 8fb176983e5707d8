"""
Murmur Backend — Post Route Handlers
======================================

Routes (session required):
    GET    /api/secured/posts/all              every post
    GET    /api/secured/posts/following        posts by followed users
    GET    /api/secured/posts/user/{email}     posts by one author
    GET    /api/secured/posts/likes/{id}       posts liked by a user
    POST   /api/secured/posts/create           new post (201)
    POST   /api/secured/posts/comment/{id}     add a comment
    POST   /api/secured/posts/like/{id}        like / unlike toggle
    DELETE /api/secured/posts/delete/{id}      delete an owned post

Feeds are returned newest first, each post with its author, comments and likes.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.database import get_db_session
from murmur.dependencies import get_current_user, get_media_store
from murmur.models.user import User
from murmur.schemas.common import ErrorResponse
from murmur.schemas.post import (
    CommentRequest,
    CreatePostRequest,
    DeletePostResponse,
    LikeToggleResponse,
    PostResponse,
)
from murmur.services.media_base import MediaStore
from murmur.services.post_service import post_service

router = APIRouter(
    prefix="/api/secured/posts",
    tags=["Posts"],
    responses={401: {"description": "No valid session", "model": ErrorResponse}},
)

_not_found = {404: {"description": "Not found", "model": ErrorResponse}}


# ── Feeds ─────────────────────────────────────────────────────────────────

@router.get("/all", response_model=List[PostResponse], summary="All posts")
async def get_all_posts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.get_all_posts(db)


@router.get("/following", response_model=List[PostResponse], summary="Posts by followed users")
async def get_following_posts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.get_following_posts(db, user)


@router.get(
    "/user/{email}",
    response_model=List[PostResponse],
    responses=_not_found,
    summary="Posts by author email",
)
async def get_user_posts(
    email: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.get_user_posts(db, email)


@router.get(
    "/likes/{user_id}",
    response_model=List[PostResponse],
    responses=_not_found,
    summary="Posts liked by a user",
)
async def get_liked_posts(
    user_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.get_liked_posts(db, user_id)


# ── Mutations ─────────────────────────────────────────────────────────────

@router.post(
    "/create",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Post must have text or image", "model": ErrorResponse},
        502: {"description": "Media host unavailable", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    body: CreatePostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    media: MediaStore = Depends(get_media_store),
) -> PostResponse:
    return await post_service.create_post(db, media, user, body)


@router.post(
    "/comment/{post_id}",
    response_model=PostResponse,
    responses={**_not_found, 400: {"description": "Empty comment", "model": ErrorResponse}},
    summary="Comment on a post",
)
async def comment_on_post(
    post_id: UUID,
    body: CommentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.comment_on_post(db, user, post_id, body)


@router.post(
    "/like/{post_id}",
    response_model=LikeToggleResponse,
    responses=_not_found,
    summary="Like or unlike a post",
)
async def like_unlike_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeToggleResponse:
    return await post_service.like_unlike_post(db, user, post_id)


@router.delete(
    "/delete/{post_id}",
    response_model=DeletePostResponse,
    responses={**_not_found, 403: {"description": "Not the owner", "model": ErrorResponse}},
    summary="Delete an owned post",
)
async def delete_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    media: MediaStore = Depends(get_media_store),
) -> DeletePostResponse:
    return await post_service.delete_post(db, media, user, post_id)
