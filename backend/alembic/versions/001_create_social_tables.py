"""Create users, follow graph, posts, comments, likes and notifications

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema. Mirrors the ORM models in murmur/models/.
Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _user_fk(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("link", sa.String(255), nullable=True),
        sa.Column("profile_img", sa.String(500), nullable=True, comment="Media host URL"),
        sa.Column("cover_img", sa.String(500), nullable=True, comment="Media host URL"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    # ── follow graph (mirror tables) ──────────────────────────────────────
    op.create_table(
        "following",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("user_id"),
        _user_fk("following_id"),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "following_id", name="uq_following_pair"),
    )
    op.create_index("idx_following_following_id", "following", ["following_id"])

    op.create_table(
        "followers",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("user_id"),
        _user_fk("follower_id"),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "follower_id", name="uq_followers_pair"),
    )
    op.create_index("idx_followers_follower_id", "followers", ["follower_id"])

    # ── posts ─────────────────────────────────────────────────────────────
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("user_id"),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("img", sa.String(500), nullable=True, comment="Media host URL"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("text IS NOT NULL OR img IS NOT NULL", name="ck_posts_text_or_img"),
    )
    op.create_index("idx_posts_user_created", "posts", ["user_id", "created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        _user_fk("user_id"),
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "likes",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("user_id"),
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
    )
    op.create_index("idx_likes_post_id", "likes", ["post_id"])

    # ── notifications ─────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("from_user_id"),
        _user_fk("to_user_id"),
        sa.Column("type", sa.String(20), nullable=False, comment="like | follow"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notifications_to_user_created",
        "notifications",
        ["to_user_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_notifications_to_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_likes_post_id", table_name="likes")
    op.drop_table("likes")
    op.drop_index("idx_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_posts_user_created", table_name="posts")
    op.drop_table("posts")
    op.drop_index("idx_followers_follower_id", table_name="followers")
    op.drop_table("followers")
    op.drop_index("idx_following_following_id", table_name="following")
    op.drop_table("following")
    op.drop_table("users")
