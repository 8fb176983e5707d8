"""
Murmur Backend — User Service
===============================

What:  Profiles, the follow graph, suggestions and profile updates.
Who:   Called by the /api/secured/user routes.

Follow graph:
    Following and Follower rows are always written and removed as a pair, in
    the request's transaction. A new edge also notifies the followed user.

Profile update rules:
    - None / absent fields are left untouched; "" clears bio and link
    - a password change (either password field non-empty) needs both
      currentPassword and newPassword, the current one must verify, the new
      one must be long enough
    - email / username changes must stay unique
    - a new profile or cover image is uploaded first; the old one is removed
      from the media host only after the transaction commits
"""

import logging
import random
from functools import partial
from typing import List
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.config import settings
from murmur.database import after_commit, after_rollback
from murmur.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from murmur.models.notification import Notification, NotificationType
from murmur.models.post import Post
from murmur.models.user import Follower, Following, User
from murmur.schemas.user import FollowResponse, UpdateUserRequest, UserProfileResponse, UserResponse
from murmur.security import hash_password, verify_password
from murmur.services.auth_service import ensure_unique_identity
from murmur.services.media_base import MediaStore

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for users and the follow graph."""

    async def _build_profile(self, db: AsyncSession, user: User) -> UserProfileResponse:
        """Public profile plus follower/following ids and the post count."""
        followers = (await db.execute(
            select(Follower.follower_id).where(Follower.user_id == user.id)
        )).scalars().all()
        following = (await db.execute(
            select(Following.following_id).where(Following.user_id == user.id)
        )).scalars().all()
        post_count = (await db.execute(
            select(func.count()).select_from(Post).where(Post.user_id == user.id)
        )).scalar_one()

        profile = UserResponse.model_validate(user).model_dump()
        return UserProfileResponse(
            **profile,
            followers=list(followers),
            following=list(following),
            post_count=post_count,
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_me(self, db: AsyncSession, user: User) -> UserProfileResponse:
        return await self._build_profile(db, user)

    async def get_user_profile(self, db: AsyncSession, email: str) -> UserProfileResponse:
        """
        Raises:
            NotFoundError: no user with that email
        """
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=email)
        return await self._build_profile(db, user)

    async def get_suggested_users(self, db: AsyncSession, user: User) -> List[UserResponse]:
        """
        Uniform random sample of users the caller does not follow yet.

        The caller is never suggested. At most settings.suggestion_limit.
        """
        followed = select(Following.following_id).where(Following.user_id == user.id)
        try:
            candidates = (await db.execute(
                select(User).where(User.id != user.id, User.id.not_in(followed))
            )).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error loading suggestions: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        sample = random.sample(list(candidates), k=min(settings.suggestion_limit, len(candidates)))
        return [UserResponse.model_validate(u) for u in sample]

    # ── Follow Graph ──────────────────────────────────────────────────────

    async def follow_unfollow_user(
        self,
        db: AsyncSession,
        user: User,
        target_id: UUID,
    ) -> FollowResponse:
        """
        Toggle the follow edge user → target.

        Raises:
            ValidationError: user tried to follow themselves
            NotFoundError: no such target user
        """
        if target_id == user.id:
            raise ValidationError(message="You cannot follow/unfollow yourself", field="id")

        target = await db.get(User, target_id)
        if target is None:
            raise NotFoundError(resource="user", resource_id=str(target_id))

        try:
            existing = await db.execute(
                select(Following.id).where(
                    Following.user_id == user.id,
                    Following.following_id == target.id,
                )
            )
            if existing.first() is None:
                db.add(Following(user_id=user.id, following_id=target.id))
                db.add(Follower(user_id=target.id, follower_id=user.id))
                db.add(Notification(
                    from_user_id=user.id,
                    to_user_id=target.id,
                    type=NotificationType.FOLLOW.value,
                ))
                now_following = True
            else:
                await db.execute(delete(Following).where(
                    Following.user_id == user.id,
                    Following.following_id == target.id,
                ))
                await db.execute(delete(Follower).where(
                    Follower.user_id == target.id,
                    Follower.follower_id == user.id,
                ))
                now_following = False
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to toggle follow %s -> %s: %s", user.id, target.id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        if now_following:
            logger.info("User %s followed %s", user.id, target.id)
            return FollowResponse(message="User followed successfully", following=True)
        logger.info("User %s unfollowed %s", user.id, target.id)
        return FollowResponse(message="User unfollowed successfully", following=False)

    # ── Profile Update ────────────────────────────────────────────────────

    async def update_user(
        self,
        db: AsyncSession,
        media: MediaStore,
        user: User,
        data: UpdateUserRequest,
    ) -> UserProfileResponse:
        """
        Apply a partial profile update.

        Raises:
            ValidationError: incomplete password pair, short new password, bad image
            InvalidCredentialsError: current password does not verify
            ConflictError: email or username taken by another account
            MediaStorageError: image upload failed
        """
        # ── Password ──────────────────────────────────────────────────────
        if data.current_password or data.new_password:
            if not data.current_password or not data.new_password:
                raise ValidationError(
                    message="Please provide both current password and new password",
                    field="currentPassword",
                )
            if not verify_password(data.current_password, user.password_hash):
                raise InvalidCredentialsError(message="Current password is incorrect")
            if len(data.new_password) < settings.min_password_length:
                raise ValidationError(
                    message=f"Password must be at least {settings.min_password_length} characters long",
                    field="newPassword",
                )
            user.password_hash = hash_password(data.new_password)

        # ── Identity ──────────────────────────────────────────────────────
        new_email = data.email.lower() if data.email is not None else None
        if new_email == user.email.lower():
            new_email = None
        new_username = data.username if data.username != user.username else None
        await ensure_unique_identity(
            db, email=new_email, username=new_username, exclude_user_id=user.id
        )
        if new_email is not None:
            user.email = new_email
        if new_username is not None:
            user.username = new_username

        # ── Plain Fields ──────────────────────────────────────────────────
        if data.full_name is not None:
            user.full_name = data.full_name
        if data.bio is not None:
            user.bio = data.bio or None
        if data.link is not None:
            user.link = data.link.strip() or None

        # ── Images ────────────────────────────────────────────────────────
        # The old asset is removed only once the new one is stored and committed
        for field in ("profile_img", "cover_img"):
            payload = getattr(data, field)
            if not payload:
                continue
            new_url = await media.upload(payload)
            after_rollback(db, partial(media.delete, new_url))
            old_url = getattr(user, field)
            if old_url:
                after_commit(db, partial(media.delete, old_url))
            setattr(user, field, new_url)

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message="Email or username already in use")
        except SQLAlchemyError as e:
            logger.error("Failed to update user %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("User %s updated profile", user.id)
        return await self._build_profile(db, user)


# ── Module-level singleton ────────────────────────────────────────────────
user_service = UserService()
