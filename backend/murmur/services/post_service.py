"""
Murmur Backend — Post Service
===============================

What:  Posts, comments, likes and the post feeds.
How:   Each method runs inside the request's session/transaction and returns
       Pydantic response models. Post graphs (author, comments with their
       authors, likes) are loaded explicitly with selectinload(); nothing is
       lazy-loaded after the query returns.
Who:   Called by the /api/secured/posts routes.

Workflows:
    create:   validate → upload image (if any) → insert post
    delete:   load → ownership check → delete comments, likes, post
              → best-effort image removal once the transaction commits
    like:     toggle the (user, post) row; a new like also notifies the owner
    comment:  insert comment → return the refreshed post

Feeds (all newest first):
    all posts | by author email | by followed users | liked by a user
"""

import logging
from functools import partial
from typing import List
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from murmur.database import after_commit, after_rollback
from murmur.exceptions import AuthorizationError, DatabaseError, NotFoundError, ValidationError
from murmur.models.notification import Notification, NotificationType
from murmur.models.post import Comment, Like, Post
from murmur.models.user import Following, User
from murmur.schemas.post import (
    CommentRequest,
    CreatePostRequest,
    DeletePostResponse,
    LikeResponse,
    LikeToggleResponse,
    PostBase,
    PostResponse,
)
from murmur.services.media_base import MediaStore

logger = logging.getLogger(__name__)


def _post_graph():
    """Loader options for everything a PostResponse serializes."""
    return (
        selectinload(Post.user),
        selectinload(Post.comments).selectinload(Comment.user),
        selectinload(Post.likes),
    )


class PostService:
    """Business logic for posts and their comments and likes."""

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _get_post(self, db: AsyncSession, post_id: UUID) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def _load_post(self, db: AsyncSession, post_id: UUID) -> Post:
        """Fetch a post with its full graph, overwriting stale collections."""
        result = await db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(*_post_graph())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _get_user_by_email(self, db: AsyncSession, email: str) -> User:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=email)
        return user

    async def _list_posts(self, db: AsyncSession, *criteria) -> List[PostResponse]:
        stmt = (
            select(Post)
            .where(*criteria)
            .options(*_post_graph())
            .order_by(Post.created_at.desc())
            .execution_options(populate_existing=True)
        )
        try:
            posts = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})
        return [PostResponse.model_validate(p) for p in posts]

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        media: MediaStore,
        user: User,
        data: CreatePostRequest,
    ) -> PostResponse:
        """
        Create a post with text, an image, or both.

        Raises:
            ValidationError: neither text nor image given, or a bad image
            MediaStorageError: the media host rejected the upload
        """
        text = (data.text or "").strip() or None
        img = (data.img or "").strip() or None
        if text is None and img is None:
            raise ValidationError(message="Post must have text or image", field="text")

        img_url = None
        if img:
            img_url = await media.upload(img)
            after_rollback(db, partial(media.delete, img_url))

        post = Post(user_id=user.id, text=text, img=img_url)
        post.user = user
        post.comments = []
        post.likes = []
        db.add(post)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create post for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Post %s created by %s (img=%s)", post.id, user.id, bool(img_url))
        return PostResponse.model_validate(post)

    async def delete_post(
        self,
        db: AsyncSession,
        media: MediaStore,
        user: User,
        post_id: UUID,
    ) -> DeletePostResponse:
        """
        Delete an owned post together with its comments and likes.

        Raises:
            NotFoundError: no such post
            AuthorizationError: caller does not own the post
        """
        post = await self._get_post(db, post_id)
        if post.user_id != user.id:
            logger.warning("User %s tried to delete post %s owned by %s", user.id, post.id, post.user_id)
            raise AuthorizationError(message="You are not authorized to delete this post")

        snapshot = PostBase.model_validate(post)
        try:
            await db.execute(delete(Comment).where(Comment.post_id == post_id))
            await db.execute(delete(Like).where(Like.post_id == post_id))
            await db.execute(delete(Post).where(Post.id == post_id))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        if snapshot.img:
            after_commit(db, partial(media.delete, snapshot.img))

        logger.info("Post %s deleted by %s", post_id, user.id)
        return DeletePostResponse(message="Post deleted successfully", post=snapshot)

    async def comment_on_post(
        self,
        db: AsyncSession,
        user: User,
        post_id: UUID,
        data: CommentRequest,
    ) -> PostResponse:
        """
        Add a comment by `user` and return the post with all its comments.

        Raises:
            ValidationError: empty comment text
            NotFoundError: no such post
        """
        text = data.text.strip()
        if not text:
            raise ValidationError(message="Text field is required", field="text")

        await self._get_post(db, post_id)
        try:
            db.add(Comment(text=text, user_id=user.id, post_id=post_id))
            await db.flush()
            post = await self._load_post(db, post_id)
        except SQLAlchemyError as e:
            logger.error("Failed to comment on post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("User %s commented on post %s", user.id, post_id)
        return PostResponse.model_validate(post)

    async def like_unlike_post(
        self,
        db: AsyncSession,
        user: User,
        post_id: UUID,
    ) -> LikeToggleResponse:
        """
        Toggle the caller's like on a post.

        A new like notifies the post owner unless the owner is the caller.
        Unliking removes every like row for the (user, post) pair.

        Raises:
            NotFoundError: no such post
        """
        post = await self._get_post(db, post_id)

        try:
            existing = await db.execute(
                select(Like.id).where(Like.user_id == user.id, Like.post_id == post_id)
            )
            if existing.first() is None:
                db.add(Like(user_id=user.id, post_id=post_id))
                if post.user_id != user.id:
                    db.add(Notification(
                        from_user_id=user.id,
                        to_user_id=post.user_id,
                        type=NotificationType.LIKE.value,
                    ))
                liked = True
            else:
                await db.execute(
                    delete(Like).where(Like.user_id == user.id, Like.post_id == post_id)
                )
                liked = False
            await db.flush()

            likes = (await db.execute(
                select(Like).where(Like.post_id == post_id).order_by(Like.created_at)
            )).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to toggle like on %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("User %s %s post %s", user.id, "liked" if liked else "unliked", post_id)
        return LikeToggleResponse(
            data=[LikeResponse.model_validate(like) for like in likes],
            liked=liked,
        )

    # ── Feeds ─────────────────────────────────────────────────────────────

    async def get_all_posts(self, db: AsyncSession) -> List[PostResponse]:
        return await self._list_posts(db)

    async def get_user_posts(self, db: AsyncSession, email: str) -> List[PostResponse]:
        """Posts authored by the user with `email`. NotFoundError if unknown."""
        author = await self._get_user_by_email(db, email)
        return await self._list_posts(db, Post.user_id == author.id)

    async def get_following_posts(self, db: AsyncSession, user: User) -> List[PostResponse]:
        """Posts by everyone `user` follows; [] when they follow nobody."""
        followed = select(Following.following_id).where(Following.user_id == user.id)
        return await self._list_posts(db, Post.user_id.in_(followed))

    async def get_liked_posts(self, db: AsyncSession, user_id: UUID) -> List[PostResponse]:
        """Posts liked by `user_id`. NotFoundError if the user is unknown."""
        if await db.get(User, user_id) is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        liked = select(Like.post_id).where(Like.user_id == user_id)
        return await self._list_posts(db, Post.id.in_(liked))


# ── Module-level singleton ────────────────────────────────────────────────
post_service = PostService()
