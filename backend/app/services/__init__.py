"""Application service helpers."""

from .profile_aggregate import (
    AggregateState,
    ProfileAggregateCoordinator,
    load_profile_aggregate,
)
from .social_store import SocialStore, SqlAlchemySocialStore, StoreError

__all__ = [
    "AggregateState",
    "ProfileAggregateCoordinator",
    "load_profile_aggregate",
    "SocialStore",
    "SqlAlchemySocialStore",
    "StoreError",
]
