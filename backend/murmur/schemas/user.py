"""
Murmur Backend — User Schemas
===============================

What:  Public user representations and the profile-update request.

Exposure rules:
    - `password_hash` is never part of any response model.
    - `UserSummary` is the compact form embedded in comments and
      notifications; `UserResponse` is the full public profile.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from murmur.schemas.common import CamelModel


class UserSummary(CamelModel):
    id: uuid.UUID
    username: str
    full_name: str
    email: str
    profile_img: Optional[str] = None


class UserResponse(CamelModel):
    """Full public profile of one user."""
    id: uuid.UUID
    username: str
    full_name: str
    email: str
    bio: Optional[str] = None
    link: Optional[str] = None
    profile_img: Optional[str] = None
    cover_img: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserProfileResponse(UserResponse):
    """Profile plus follow-graph edges (ids) and post count."""
    followers: List[uuid.UUID] = Field(default_factory=list, description="Ids of users following this user")
    following: List[uuid.UUID] = Field(default_factory=list, description="Ids of users this user follows")
    post_count: int = 0


class UpdateUserRequest(CamelModel):
    """
    Partial profile update.

    Every field is optional. A field that is absent or null is left as it is;
    only supplied values are written. `bio` and `link` accept "" to clear.
    `profile_img` / `cover_img` take base64 data URIs.
    """
    full_name: Optional[str] = Field(default=None, max_length=100)
    username: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(default=None, max_length=1000)
    link: Optional[str] = Field(default=None, max_length=255)
    current_password: Optional[str] = Field(default=None, max_length=128)
    new_password: Optional[str] = Field(default=None, max_length=128)
    profile_img: Optional[str] = None
    cover_img: Optional[str] = None

    @field_validator("full_name", "username")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class FollowResponse(CamelModel):
    message: str
    following: bool = Field(description="True when the caller now follows the target")
