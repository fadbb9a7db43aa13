"""Read models for social profiles, posts, friendships and bookmarks."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from app.models.enums import AggregatePhase, FriendshipStatus, RelationshipState


class AuthorRef(BaseModel):
    """Minimal public reference to a user embedded in other records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    avatar_url: str | None = None


class ProfileRead(BaseModel):
    """Full profile of a user as rendered on the profile page."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    bio: str | None = None
    avatar_url: str | None = None
    is_public: bool = True
    newsletter_subscribed: bool = False
    created_at: datetime
    updated_at: datetime


class ReactionCounts(BaseModel):
    """Per-kind reaction tally; always carries every known kind."""

    like: NonNegativeInt = 0
    heart: NonNegativeInt = 0
    thumbs_up: NonNegativeInt = 0
    thumbs_down: NonNegativeInt = 0


class PostRead(BaseModel):
    """Post with its author reference and read-time reaction tally."""

    id: str
    user_id: str
    content: str
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime
    user: AuthorRef
    reaction_counts: ReactionCounts = Field(default_factory=ReactionCounts)


class FriendshipRead(BaseModel):
    """Friendship edge enriched with the counterpart's profile.

    Exactly one of ``requestor`` and ``recipient`` is populated; the other
    side is the viewer.
    """

    id: str
    requestor_id: str
    recipient_id: str
    status: FriendshipStatus
    created_at: datetime
    updated_at: datetime
    requestor: AuthorRef | None = None
    recipient: AuthorRef | None = None


class BookmarkRead(BaseModel):
    """Saved post with the post hydrated inline."""

    id: str
    user_id: str
    post_id: str
    created_at: datetime
    post: PostRead


class ProfileAggregate(BaseModel):
    """Consolidated view of a profile page for one viewer."""

    profile: ProfileRead | None = None
    posts: list[PostRead] = Field(default_factory=list)
    pending_requests: list[FriendshipRead] = Field(default_factory=list)
    friends: list[FriendshipRead] = Field(default_factory=list)
    bookmarks: list[BookmarkRead] = Field(default_factory=list)
    is_current_user: bool = False
    relationship: RelationshipState = RelationshipState.NONE
    error: str | None = Field(
        default=None,
        description="User-visible message when a required lookup failed but a result was still produced",
    )


class ProfileAggregateRead(ProfileAggregate):
    """API payload: the aggregate together with its lifecycle phase."""

    phase: AggregatePhase
    target_id: str | None = None
