"""
Murmur Backend — Auth Service
===============================

What:  Account registration and credential login.
How:   Passwords are hashed with bcrypt (passlib); a successful register or
       login returns the user plus a freshly signed session token. Setting
       the cookie is the route's job.
Who:   Called by the /api/auth routes.
"""

import logging
from typing import Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.exceptions import ConflictError, DatabaseError, InvalidCredentialsError
from murmur.models.user import User
from murmur.schemas.auth import LoginRequest, RegisterRequest
from murmur.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


async def ensure_unique_identity(
    db: AsyncSession,
    email: str = None,
    username: str = None,
    exclude_user_id=None,
) -> None:
    """
    Raise ConflictError if another account already uses `email` or `username`.

    Emails compare case-insensitively. Shared with UserService.update_user().
    """
    conditions = []
    if email is not None:
        conditions.append(func.lower(User.email) == email.lower())
    if username is not None:
        conditions.append(User.username == username)
    if not conditions:
        return

    stmt = select(User.email, User.username).where(or_(*conditions))
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)

    for existing_email, existing_username in (await db.execute(stmt)).all():
        if email is not None and existing_email.lower() == email.lower():
            raise ConflictError(message="Email already in use", field="email")
        if username is not None and existing_username == username:
            raise ConflictError(message="Username already taken", field="username")


class AuthService:
    """Registration and login."""

    async def register(self, db: AsyncSession, data: RegisterRequest) -> Tuple[User, str]:
        """
        Create an account and return it with a session token.

        Raises:
            ConflictError: email or username is already taken
        """
        email = data.email.lower()
        await ensure_unique_identity(db, email=email, username=data.username)

        user = User(
            full_name=data.full_name,
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration
            raise ConflictError(message="Email or username already in use")
        except Exception as e:
            logger.error("Failed to create user %s: %s", data.username, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("User registered: %s (%s)", user.username, user.id)
        return user, create_access_token(user.id)

    async def login(self, db: AsyncSession, data: LoginRequest) -> Tuple[User, str]:
        """
        Verify credentials and return the user with a session token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password (same message)
        """
        try:
            result = await db.execute(
                select(User).where(func.lower(User.email) == data.email.lower())
            )
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login attempt for %s", data.email)
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.id)
        return user, create_access_token(user.id)


# ── Module-level singleton ────────────────────────────────────────────────
auth_service = AuthService()
