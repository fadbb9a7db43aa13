"""Social profile page endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_session_provider, get_social_store
from app.core.security import SessionProvider
from app.models import AggregatePhase
from app.schemas import ProfileAggregateRead
from app.services.profile_aggregate import AggregateState, load_profile_aggregate
from app.services.social_store import SocialStore

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _to_response(state: AggregateState) -> ProfileAggregateRead:
    if state.phase == AggregatePhase.ERRORED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=state.error,
        )
    return state.to_read()


@router.get("/me", response_model=ProfileAggregateRead)
async def read_own_profile(
    store: SocialStore = Depends(get_social_store),
    sessions: SessionProvider = Depends(get_session_provider),
) -> ProfileAggregateRead:
    """Return the profile page of the signed-in viewer."""

    state = await load_profile_aggregate(store, sessions)
    return _to_response(state)


@router.get("/{profile_id}", response_model=ProfileAggregateRead)
async def read_profile(
    profile_id: str,
    store: SocialStore = Depends(get_social_store),
    sessions: SessionProvider = Depends(get_session_provider),
) -> ProfileAggregateRead:
    """Return the profile page of ``profile_id`` as seen by the current viewer."""

    state = await load_profile_aggregate(store, sessions, profile_id)
    return _to_response(state)
