from __future__ import annotations

from enum import Enum


class ReactionType(str, Enum):
    """Closed set of reactions a user can leave on a post."""

    LIKE = "like"
    HEART = "heart"
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"


class FriendshipStatus(str, Enum):
    """Lifecycle states for a directional friendship edge."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RelationshipState(str, Enum):
    """Friendship state between a viewer and a profile, seen from the viewer."""

    NONE = "none"
    PENDING = "pending"
    REQUESTED = "requested"
    ACCEPTED = "accepted"


class AggregatePhase(str, Enum):
    """Lifecycle phases of a profile aggregation."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERRORED = "errored"
