"""Friendship state between two users and the self-view friendship lists."""

from __future__ import annotations

import asyncio
import logging

from app.models import FriendshipStatus, RelationshipState
from app.monitoring.metrics import profile_degraded_fetches_total
from app.schemas import FriendshipRead
from app.services.authors import author_ref
from app.services.social_store import FriendshipRow, SocialStore

logger = logging.getLogger(__name__)


def relationship_from_edges(
    outgoing: FriendshipRow | None, incoming: FriendshipRow | None
) -> RelationshipState:
    """Derive the viewer's relationship state from the two directional edges.

    The outgoing edge wins when both directions exist.
    """

    if outgoing is not None:
        if outgoing.status == FriendshipStatus.ACCEPTED:
            return RelationshipState.ACCEPTED
        return RelationshipState.PENDING
    if incoming is not None:
        if incoming.status == FriendshipStatus.ACCEPTED:
            return RelationshipState.ACCEPTED
        return RelationshipState.REQUESTED
    return RelationshipState.NONE


async def resolve_relationship(
    store: SocialStore, viewer_id: str, target_id: str
) -> RelationshipState:
    """Look up both edges between viewer and target and classify them.

    A lookup that fails is treated as an absent edge.
    """

    outgoing, incoming = await asyncio.gather(
        store.find_friendship_edge(viewer_id, target_id),
        store.find_friendship_edge(target_id, viewer_id),
        return_exceptions=True,
    )
    if isinstance(outgoing, BaseException):
        logger.warning(
            "Failed to fetch friendship %s -> %s", viewer_id, target_id, exc_info=outgoing
        )
        profile_degraded_fetches_total.inc(slice="friendship_edge")
        outgoing = None
    if isinstance(incoming, BaseException):
        logger.warning(
            "Failed to fetch friendship %s -> %s", target_id, viewer_id, exc_info=incoming
        )
        profile_degraded_fetches_total.inc(slice="friendship_edge")
        incoming = None
    return relationship_from_edges(outgoing, incoming)


def _as_counterpart_of(row: FriendshipRow, viewer_id: str) -> FriendshipRead:
    # Only the side that is not the viewer is populated.
    requestor = recipient = None
    if row.requestor_id == viewer_id:
        recipient = author_ref(row.recipient, row.recipient_id)
    else:
        requestor = author_ref(row.requestor, row.requestor_id)
    return FriendshipRead(
        id=row.id,
        requestor_id=row.requestor_id,
        recipient_id=row.recipient_id,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
        requestor=requestor,
        recipient=recipient,
    )


async def list_pending_requests(store: SocialStore, user_id: str) -> list[FriendshipRead]:
    """Incoming friend requests still awaiting a response from ``user_id``."""

    rows = await store.list_friendship_edges(
        recipient_id=user_id, status=FriendshipStatus.PENDING
    )
    return [_as_counterpart_of(row, user_id) for row in rows]


async def list_friends(store: SocialStore, user_id: str) -> list[FriendshipRead]:
    """Accepted friendships of ``user_id`` in either direction.

    Edges sent by the user come first, followed by edges they accepted. A
    failing direction contributes nothing.
    """

    sent, received = await asyncio.gather(
        store.list_friendship_edges(requestor_id=user_id, status=FriendshipStatus.ACCEPTED),
        store.list_friendship_edges(recipient_id=user_id, status=FriendshipStatus.ACCEPTED),
        return_exceptions=True,
    )

    friends: list[FriendshipRead] = []
    for direction, rows in (("requestor", sent), ("recipient", received)):
        if isinstance(rows, BaseException):
            logger.warning(
                "Failed to fetch friends of %s as %s", user_id, direction, exc_info=rows
            )
            profile_degraded_fetches_total.inc(slice="friends")
            continue
        friends.extend(_as_counterpart_of(row, user_id) for row in rows)
    return friends
