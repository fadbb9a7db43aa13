"""Profile post feed with read-time reaction tallies."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Iterable

from app.models import ReactionType
from app.monitoring.metrics import profile_degraded_fetches_total
from app.schemas import PostRead, ReactionCounts
from app.services.authors import post_read
from app.services.social_store import ReactionRow, SocialStore

logger = logging.getLogger(__name__)

_KNOWN_KINDS = frozenset(kind.value for kind in ReactionType)


def tally_reactions(reactions: Iterable[ReactionRow]) -> ReactionCounts:
    """Fold raw reactions into a tally of the four known kinds.

    Kinds outside :class:`ReactionType`, including non-string values, are
    ignored.
    """

    counter: Counter[str] = Counter()
    for reaction in reactions:
        kind = reaction.type
        if isinstance(kind, ReactionType):
            kind = kind.value
        if isinstance(kind, str) and kind in _KNOWN_KINDS:
            counter[kind] += 1
    return ReactionCounts(**{kind: counter[kind] for kind in _KNOWN_KINDS})


async def _post_counts(store: SocialStore, post_id: str) -> ReactionCounts:
    return tally_reactions(await store.list_reactions(post_id))


async def aggregate_posts(store: SocialStore, user_id: str) -> list[PostRead]:
    """Return the posts of ``user_id`` newest first with reaction counts.

    A post whose reactions cannot be fetched keeps zero counts. A failure of
    the post listing itself yields an empty feed.
    """

    try:
        rows = await store.list_posts(user_id)
    except Exception:
        logger.warning("Failed to fetch posts for %s", user_id, exc_info=True)
        profile_degraded_fetches_total.inc(slice="posts")
        return []

    if not rows:
        return []

    outcomes = await asyncio.gather(
        *(_post_counts(store, row.id) for row in rows),
        return_exceptions=True,
    )

    posts: list[PostRead] = []
    for row, outcome in zip(rows, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            logger.warning(
                "Failed to fetch reactions for post %s", row.id, exc_info=outcome
            )
            profile_degraded_fetches_total.inc(slice="reactions")
            outcome = ReactionCounts()
        posts.append(post_read(row, outcome))
    return posts
