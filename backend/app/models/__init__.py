"""Database models package."""

from .base import Base
from .enums import AggregatePhase, FriendshipStatus, ReactionType, RelationshipState
from .social import Bookmark, Friendship, Post, Reaction, UserProfile

__all__ = [
    "Base",
    "UserProfile",
    "Post",
    "Reaction",
    "Friendship",
    "Bookmark",
    "AggregatePhase",
    "FriendshipStatus",
    "ReactionType",
    "RelationshipState",
]
