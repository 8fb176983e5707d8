"""
Murmur Backend — Post Schemas
===============================

What:  Request bodies and response shapes for the posts API.

A `PostResponse` embeds its author, comments (each with a compact author)
and like rows, so the client renders a feed without follow-up requests.
PostService loads exactly this graph with selectinload().
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from murmur.schemas.common import CamelModel
from murmur.schemas.user import UserResponse, UserSummary


class CreatePostRequest(CamelModel):
    """At least one of `text` / `img` must be non-empty (checked by PostService)."""
    text: Optional[str] = Field(default=None, max_length=5000)
    img: Optional[str] = Field(default=None, description="Base64 data URI of the image")


class CommentRequest(CamelModel):
    text: str = Field(max_length=2000)


class LikeResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    post_id: uuid.UUID
    created_at: datetime


class CommentResponse(CamelModel):
    id: uuid.UUID
    text: str
    user_id: uuid.UUID
    post_id: uuid.UUID
    created_at: datetime
    user: UserSummary


class PostBase(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    text: Optional[str] = None
    img: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PostResponse(PostBase):
    user: UserResponse
    comments: List[CommentResponse] = Field(default_factory=list)
    likes: List[LikeResponse] = Field(default_factory=list)


class DeletePostResponse(CamelModel):
    message: str
    post: PostBase


class LikeToggleResponse(CamelModel):
    """Likes of the post after the toggle."""
    data: List[LikeResponse]
    liked: bool = Field(description="True when the caller now likes the post")
