"""Read-only query interface over the social tables."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.models import Bookmark, Friendship, FriendshipStatus, Post, Reaction, UserProfile


class StoreError(Exception):
    """Raised when the backing store cannot answer a query."""


@dataclass(slots=True)
class ProfileRow:
    id: str
    display_name: str
    bio: str | None
    avatar_url: str | None
    is_public: bool
    newsletter_subscribed: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class AuthorRow:
    id: str
    display_name: str
    avatar_url: str | None = None


@dataclass(slots=True)
class PostRow:
    id: str
    user_id: str
    content: str
    image_url: str | None
    created_at: datetime
    updated_at: datetime
    author: AuthorRow | None = None


@dataclass(slots=True)
class ReactionRow:
    id: str
    post_id: str
    type: object


@dataclass(slots=True)
class FriendshipRow:
    id: str
    requestor_id: str
    recipient_id: str
    status: FriendshipStatus
    created_at: datetime
    updated_at: datetime
    requestor: AuthorRow | None = None
    recipient: AuthorRow | None = None


@dataclass(slots=True)
class BookmarkRow:
    id: str
    user_id: str
    post_id: str
    created_at: datetime
    post: PostRow | None = None


class SocialStore(Protocol):
    """Queries the profile aggregation relies on.

    ``None`` means "not found"; transport or backend failures raise.
    """

    async def get_profile(self, user_id: str) -> ProfileRow | None:  # pragma: no cover - Protocol
        ...

    async def list_posts(self, user_id: str) -> list[PostRow]:  # pragma: no cover - Protocol
        """Posts of ``user_id``, newest first, with the author joined."""
        ...

    async def list_reactions(self, post_id: str) -> list[ReactionRow]:  # pragma: no cover - Protocol
        ...

    async def find_friendship_edge(
        self, requestor_id: str, recipient_id: str
    ) -> FriendshipRow | None:  # pragma: no cover - Protocol
        ...

    async def list_friendship_edges(
        self,
        *,
        status: FriendshipStatus,
        requestor_id: str | None = None,
        recipient_id: str | None = None,
    ) -> list[FriendshipRow]:  # pragma: no cover - Protocol
        """Edges matching ``status`` and exactly one of the two role filters.

        The profile on the opposite side of the filtered role is joined.
        """
        ...

    async def list_bookmarks(self, user_id: str) -> list[BookmarkRow]:  # pragma: no cover - Protocol
        """Bookmarks of ``user_id`` with the post and its author joined."""
        ...


def _author_row(profile: UserProfile | None) -> AuthorRow | None:
    if profile is None:
        return None
    return AuthorRow(id=profile.id, display_name=profile.display_name, avatar_url=profile.avatar_url)


def _post_row(post: Post) -> PostRow:
    return PostRow(
        id=post.id,
        user_id=post.user_id,
        content=post.content,
        image_url=post.image_url,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=_author_row(post.author),
    )


def _friendship_row(link: Friendship, *, join_requestor: bool, join_recipient: bool) -> FriendshipRow:
    return FriendshipRow(
        id=link.id,
        requestor_id=link.requestor_id,
        recipient_id=link.recipient_id,
        status=link.status,
        created_at=link.created_at,
        updated_at=link.updated_at,
        requestor=_author_row(link.requestor) if join_requestor else None,
        recipient=_author_row(link.recipient) if join_recipient else None,
    )


class SqlAlchemySocialStore:
    """:class:`SocialStore` backed by a SQLAlchemy session.

    Queries are synchronous and run to completion inside each coroutine, so
    concurrently gathered calls never interleave on the shared session.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    async def get_profile(self, user_id: str) -> ProfileRow | None:
        try:
            profile = self._db.get(UserProfile, user_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"profile lookup failed for {user_id}") from exc
        if profile is None:
            return None
        return ProfileRow(
            id=profile.id,
            display_name=profile.display_name,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            is_public=profile.is_public,
            newsletter_subscribed=profile.newsletter_subscribed,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )

    async def list_posts(self, user_id: str) -> list[PostRow]:
        stmt = (
            select(Post)
            .where(Post.user_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        try:
            posts = self._db.execute(stmt).unique().scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"post listing failed for {user_id}") from exc
        return [_post_row(post) for post in posts]

    async def list_reactions(self, post_id: str) -> list[ReactionRow]:
        stmt = select(Reaction.id, Reaction.post_id, Reaction.type).where(Reaction.post_id == post_id)
        try:
            rows = self._db.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"reaction listing failed for post {post_id}") from exc
        return [ReactionRow(id=row.id, post_id=row.post_id, type=row.type) for row in rows]

    async def find_friendship_edge(self, requestor_id: str, recipient_id: str) -> FriendshipRow | None:
        stmt = select(Friendship).where(
            Friendship.requestor_id == requestor_id,
            Friendship.recipient_id == recipient_id,
        )
        try:
            link = self._db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"friendship lookup failed for {requestor_id}->{recipient_id}") from exc
        if link is None:
            return None
        return _friendship_row(link, join_requestor=False, join_recipient=False)

    async def list_friendship_edges(
        self,
        *,
        status: FriendshipStatus,
        requestor_id: str | None = None,
        recipient_id: str | None = None,
    ) -> list[FriendshipRow]:
        if (requestor_id is None) == (recipient_id is None):
            raise ValueError("Exactly one of requestor_id or recipient_id must be given")

        stmt = select(Friendship).where(Friendship.status == status)
        if requestor_id is not None:
            stmt = stmt.where(Friendship.requestor_id == requestor_id).options(
                selectinload(Friendship.recipient)
            )
        else:
            stmt = stmt.where(Friendship.recipient_id == recipient_id).options(
                selectinload(Friendship.requestor)
            )
        stmt = stmt.order_by(Friendship.created_at.asc(), Friendship.id.asc())
        try:
            links = self._db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError("friendship listing failed") from exc
        return [
            _friendship_row(
                link,
                join_requestor=recipient_id is not None,
                join_recipient=requestor_id is not None,
            )
            for link in links
        ]

    async def list_bookmarks(self, user_id: str) -> list[BookmarkRow]:
        stmt = (
            select(Bookmark)
            .where(Bookmark.user_id == user_id)
            .options(selectinload(Bookmark.post))
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        )
        try:
            bookmarks = self._db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"bookmark listing failed for {user_id}") from exc
        return [
            BookmarkRow(
                id=bookmark.id,
                user_id=bookmark.user_id,
                post_id=bookmark.post_id,
                created_at=bookmark.created_at,
                post=_post_row(bookmark.post) if bookmark.post is not None else None,
            )
            for bookmark in bookmarks
        ]
