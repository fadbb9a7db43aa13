"""Hydration of a user's saved posts."""

from __future__ import annotations

import logging

from app.schemas import BookmarkRead
from app.services.authors import post_read
from app.services.social_store import SocialStore

logger = logging.getLogger(__name__)


async def hydrate_bookmarks(store: SocialStore, user_id: str) -> list[BookmarkRead]:
    """Return bookmarks of ``user_id`` with their posts embedded.

    Embedded posts keep zero reaction counts; tallies are only computed for
    the profile's own feed.
    """

    rows = await store.list_bookmarks(user_id)
    bookmarks: list[BookmarkRead] = []
    for row in rows:
        if row.post is None:
            logger.warning("Skipping bookmark %s: post %s is missing", row.id, row.post_id)
            continue
        bookmarks.append(
            BookmarkRead(
                id=row.id,
                user_id=row.user_id,
                post_id=row.post_id,
                created_at=row.created_at,
                post=post_read(row.post),
            )
        )
    return bookmarks
