"""Pydantic schemas for API payloads."""

from .social import (
    AuthorRef,
    BookmarkRead,
    FriendshipRead,
    PostRead,
    ProfileAggregate,
    ProfileAggregateRead,
    ProfileRead,
    ReactionCounts,
)

__all__ = [
    "AuthorRef",
    "BookmarkRead",
    "FriendshipRead",
    "PostRead",
    "ProfileAggregate",
    "ProfileAggregateRead",
    "ProfileRead",
    "ReactionCounts",
]
