"""Assembly of a profile page from several independent store queries.

The coordinator resolves who is looking at which profile, loads (or
synthesizes) the profile, and only then fans out into the post feed, the
friendship state and, for self-views, the friend lists and bookmarks.
Failures of individual slices degrade that slice; only a failure of the
orchestration itself ends in the ``errored`` phase.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, TypeVar

from app.config import get_settings
from app.core.security import SessionError, SessionIdentity, SessionProvider
from app.models import AggregatePhase
from app.monitoring.metrics import profile_aggregations_total, profile_degraded_fetches_total
from app.schemas import ProfileAggregate, ProfileAggregateRead, ProfileRead
from app.services.bookmarks import hydrate_bookmarks
from app.services.posts import aggregate_posts
from app.services.relationships import list_friends, list_pending_requests, resolve_relationship
from app.services.social_store import SocialStore

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load profile data"
DEFAULT_PROFILE_TIMESTAMP = datetime(1970, 1, 1, tzinfo=timezone.utc)

T = TypeVar("T")


@dataclass(slots=True)
class AggregateState:
    """Snapshot of the coordinator: the phase plus its result or error."""

    phase: AggregatePhase = AggregatePhase.IDLE
    target_id: str | None = None
    result: ProfileAggregate | None = None
    error: str | None = None

    def to_read(self) -> ProfileAggregateRead:
        result = self.result or ProfileAggregate()
        payload = result.model_dump()
        payload["error"] = self.error
        return ProfileAggregateRead(phase=self.phase, target_id=self.target_id, **payload)


@dataclass(slots=True, frozen=True)
class ResolvedIdentities:
    viewer: SessionIdentity | None
    target_id: str | None

    @property
    def is_self(self) -> bool:
        return self.viewer is not None and self.viewer.user_id == self.target_id


@dataclass(slots=True, frozen=True)
class ProfileLookup:
    profile: ProfileRead | None
    failed: bool = False


async def resolve_identities(
    sessions: SessionProvider, target_id: str | None = None
) -> ResolvedIdentities:
    """Resolve the viewer and the effective target, defaulting to the viewer."""

    try:
        viewer = await sessions.get_session()
    except Exception as exc:
        raise SessionError("Session lookup failed") from exc
    effective = target_id or (viewer.user_id if viewer is not None else None)
    return ResolvedIdentities(viewer=viewer, target_id=effective)


def build_default_profile(viewer: SessionIdentity) -> ProfileRead:
    """In-memory profile for a viewer who has no profile row yet."""

    settings = get_settings()
    display_name = ""
    if viewer.email:
        display_name = viewer.email.split("@", 1)[0]
    # A fixed stamp keeps repeated loads of an unsaved profile identical.
    now = DEFAULT_PROFILE_TIMESTAMP
    return ProfileRead(
        id=viewer.user_id,
        display_name=display_name or settings.placeholder_display_name,
        bio=None,
        avatar_url=None,
        is_public=True,
        newsletter_subscribed=False,
        created_at=now,
        updated_at=now,
    )


async def load_profile(
    store: SocialStore, target_id: str, viewer: SessionIdentity | None
) -> ProfileLookup:
    """Fetch the target profile, synthesizing one when viewers look at themselves."""

    failed = False
    try:
        row = await store.get_profile(target_id)
    except Exception:
        logger.warning("Failed to fetch profile %s", target_id, exc_info=True)
        row, failed = None, True

    if row is not None:
        return ProfileLookup(profile=ProfileRead.model_validate(row))

    if viewer is not None and viewer.user_id == target_id:
        logger.info("No profile row for %s, using a default profile", target_id)
        return ProfileLookup(profile=build_default_profile(viewer), failed=failed)

    if not failed:
        logger.info("Profile %s not found", target_id)
    return ProfileLookup(profile=None, failed=failed)


async def _fail_soft(slice_name: str, awaitable: Awaitable[list[T]]) -> list[T]:
    try:
        return await awaitable
    except Exception:
        logger.warning("Failed to fetch %s", slice_name, exc_info=True)
        profile_degraded_fetches_total.inc(slice=slice_name)
        return []


class ProfileAggregateCoordinator:
    """Stateful loader of profile aggregates for a single consumer.

    Every call to :meth:`load` supersedes the previous ones: a call that
    completes after a newer call was started does not touch :attr:`state`.
    """

    def __init__(self, store: SocialStore, sessions: SessionProvider) -> None:
        self._store = store
        self._sessions = sessions
        self._state = AggregateState()
        self._request_seq = 0
        self._latest_request: tuple[int, str | None] | None = None

    @property
    def state(self) -> AggregateState:
        return self._state

    @property
    def phase(self) -> AggregatePhase:
        return self._state.phase

    def load(self, target_id: str | None = None) -> asyncio.Task[AggregateState]:
        """Start aggregating the profile of ``target_id`` (the viewer's own by default).

        The request is registered and the phase set to ``loading`` before this
        returns; the returned task resolves to the final state. Must be called
        with an event loop running.
        """

        self._request_seq += 1
        request = (self._request_seq, target_id)
        self._latest_request = request
        self._state = AggregateState(phase=AggregatePhase.LOADING, target_id=target_id)
        return asyncio.ensure_future(self._finish(request, target_id))

    async def _finish(self, request: tuple[int, str | None], target_id: str | None) -> AggregateState:
        outcome = await self._run(target_id)

        if self._latest_request != request:
            logger.debug("Discarding stale profile aggregation for %s", target_id)
            return outcome
        self._state = outcome
        profile_aggregations_total.inc(phase=outcome.phase.value)
        return outcome

    async def _run(self, target_id: str | None) -> AggregateState:
        try:
            identities = await resolve_identities(self._sessions, target_id)
            if identities.target_id is None:
                return AggregateState(phase=AggregatePhase.EMPTY)
            result = await self._aggregate(identities, identities.target_id)
        except Exception:
            logger.exception("Error in profile loading for %s", target_id)
            return AggregateState(
                phase=AggregatePhase.ERRORED,
                target_id=target_id,
                error=LOAD_FAILED_MESSAGE,
            )
        return AggregateState(
            phase=AggregatePhase.READY,
            target_id=identities.target_id,
            result=result,
            error=result.error,
        )

    async def _aggregate(self, identities: ResolvedIdentities, target_id: str) -> ProfileAggregate:
        is_self = identities.is_self

        lookup = await load_profile(self._store, target_id, identities.viewer)
        result = ProfileAggregate(
            profile=lookup.profile,
            is_current_user=is_self,
            error=LOAD_FAILED_MESSAGE if lookup.failed else None,
        )
        # Nothing else is fetched for a profile that renders as "not found".
        if lookup.profile is None:
            return result

        if is_self:
            posts, pending, friends, bookmarks = await asyncio.gather(
                aggregate_posts(self._store, target_id),
                _fail_soft("pending_requests", list_pending_requests(self._store, target_id)),
                _fail_soft("friends", list_friends(self._store, target_id)),
                _fail_soft("bookmarks", hydrate_bookmarks(self._store, target_id)),
            )
            result.posts = posts
            result.pending_requests = pending
            result.friends = friends
            result.bookmarks = bookmarks
        elif identities.viewer is not None:
            result.posts, result.relationship = await asyncio.gather(
                aggregate_posts(self._store, target_id),
                resolve_relationship(self._store, identities.viewer.user_id, target_id),
            )
        else:
            result.posts = await aggregate_posts(self._store, target_id)
        return result


async def load_profile_aggregate(
    store: SocialStore,
    sessions: SessionProvider,
    target_id: str | None = None,
) -> AggregateState:
    """One-shot aggregation without keeping a coordinator around."""

    return await ProfileAggregateCoordinator(store, sessions).load(target_id)
