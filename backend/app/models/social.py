from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, foreign, mapped_column, relationship

from app.models.base import Base
from app.models.enums import FriendshipStatus, ReactionType


def _new_id() -> str:
    return str(uuid.uuid4())


# Identities are issued by the external auth provider. Rows keyed by a user id
# do not carry a foreign key to ``user_profiles`` because the profile row is
# created lazily and may not exist yet.


class UserProfile(Base):
    """Public profile attached to an account identity."""

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text)
    avatar_url: Mapped[str | None] = mapped_column(String(512))
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    newsletter_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Post(Base):
    """Short social post written by a user."""

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_user_created", "user_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    author: Mapped[UserProfile | None] = relationship(
        primaryjoin=lambda: foreign(Post.user_id) == UserProfile.id,
        viewonly=True,
        lazy="joined",
    )
    reactions: Mapped[list["Reaction"]] = relationship(
        back_populates="post", cascade="all, delete-orphan"
    )


class Reaction(Base):
    """A single reaction left by a user on a post."""

    __tablename__ = "reactions"
    __table_args__ = (Index("ix_reactions_post", "post_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    post_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    # Stored as plain text; rows written by older clients may hold kinds
    # outside of ReactionType.
    type: Mapped[str] = mapped_column(String(32), default=ReactionType.LIKE.value, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    post: Mapped[Post] = relationship(back_populates="reactions")


class Friendship(Base):
    """Directional friendship edge from a requestor to a recipient."""

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("requestor_id", "recipient_id", name="uq_friendship_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    requestor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    recipient_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[FriendshipStatus] = mapped_column(
        SAEnum(
            FriendshipStatus,
            name="friendship_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=FriendshipStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    requestor: Mapped[UserProfile | None] = relationship(
        primaryjoin=lambda: foreign(Friendship.requestor_id) == UserProfile.id,
        viewonly=True,
    )
    recipient: Mapped[UserProfile | None] = relationship(
        primaryjoin=lambda: foreign(Friendship.recipient_id) == UserProfile.id,
        viewonly=True,
    )


class Bookmark(Base):
    """A post saved by a user for later."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_bookmark_user_post"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    post_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    post: Mapped[Post | None] = relationship()
