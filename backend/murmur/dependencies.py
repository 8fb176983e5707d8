"""
Murmur Backend — Request Dependencies
=======================================

What:  FastAPI dependencies shared by the secured routers.
How:   `get_current_user` resolves the session token to a User row;
       `get_media_store` hands out the configured media host.

Session resolution:
    1. Token from the `token` cookie, else from `Authorization: Bearer ...`
    2. Missing token                    → 401
    3. Bad signature / no subject       → 401
    4. Expired                          → 401 and the cookie is cleared
    5. Subject no longer a user         → 404
    6. Otherwise the User is returned and request.state.user_id is set
       (picked up by the access log)
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.config import settings
from murmur.database import get_db_session
from murmur.exceptions import AuthenticationError, NotFoundError
from murmur.models.user import User
from murmur.security import TokenExpired, TokenInvalid, decode_access_token
from murmur.services.media_base import MediaStore
from murmur.services.media_service import build_media_store

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_media_store() -> MediaStore:
    """Process-wide media store (overridden in tests)."""
    return build_media_store()


# ── Session Cookie Helpers ────────────────────────────────────────────────
def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        samesite="strict",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="strict",
        secure=settings.session_cookie_secure,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Resolve the caller of a secured route.

    Raises:
        AuthenticationError: no usable token (clear_session=True when expired)
        NotFoundError: token is valid but its user no longer exists
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise AuthenticationError("Unauthorized: No token provided")

    try:
        user_id = decode_access_token(token)
    except TokenExpired:
        raise AuthenticationError("Unauthorized: Token expired", clear_session=True)
    except TokenInvalid as e:
        logger.debug("Rejected session token: %s", str(e))
        raise AuthenticationError("Unauthorized: Invalid token")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(resource="user", resource_id=str(user_id))

    request.state.user_id = str(user.id)
    return user
