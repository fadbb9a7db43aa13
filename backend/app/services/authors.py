"""Mapping of store rows onto read models shared by the aggregation steps."""

from __future__ import annotations

from app.config import get_settings
from app.schemas import AuthorRef, PostRead, ReactionCounts
from app.services.social_store import AuthorRow, PostRow


def author_ref(author: AuthorRow | None, user_id: str) -> AuthorRef:
    """Return the joined author, or a placeholder reference when it is missing."""

    if author is None:
        return AuthorRef(id=user_id, display_name=get_settings().unknown_user_display_name)
    return AuthorRef(
        id=author.id,
        display_name=author.display_name or get_settings().unknown_user_display_name,
        avatar_url=author.avatar_url,
    )


def post_read(row: PostRow, counts: ReactionCounts | None = None) -> PostRead:
    return PostRead(
        id=row.id,
        user_id=row.user_id,
        content=row.content,
        image_url=row.image_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
        user=author_ref(row.author, row.user_id),
        reaction_counts=counts if counts is not None else ReactionCounts(),
    )
