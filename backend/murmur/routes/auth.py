"""
Murmur Backend — Auth Route Handlers
======================================

What:  POST /api/auth/register, POST /api/auth/login, POST /api/secured/logout.
How:   Delegates to AuthService and manages the session cookie.

Cookie:
    token=<jwt>; HttpOnly; SameSite=Strict; Max-Age=15 days; Secure per setting
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.database import get_db_session
from murmur.dependencies import clear_session_cookie, get_current_user, set_session_cookie
from murmur.models.user import User
from murmur.schemas.auth import LoginRequest, RegisterRequest
from murmur.schemas.common import ErrorResponse, MessageResponse
from murmur.schemas.user import UserResponse
from murmur.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
secured_router = APIRouter(prefix="/api/secured", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid input or duplicate account", "model": ErrorResponse}},
    summary="Create an account and start a session",
)
async def register(
    body: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user, token = await auth_service.register(db, body)
    set_session_cookie(response, token)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={400: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Verify credentials and start a session",
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user, token = await auth_service.login(db, body)
    set_session_cookie(response, token)
    return UserResponse.model_validate(user)


@secured_router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"description": "No session", "model": ErrorResponse}},
    summary="End the session",
)
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
) -> MessageResponse:
    clear_session_cookie(response)
    logger.info("User logged out: %s", user.id)
    return MessageResponse(message="Logged out successfully")
