"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Iterator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.main import app
from app.models import Base, FriendshipStatus
from app.monitoring.metrics import profile_aggregations_total, profile_degraded_fetches_total
from app.services.social_store import (
    AuthorRow,
    BookmarkRow,
    FriendshipRow,
    PostRow,
    ProfileRow,
    ReactionRow,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    profile_aggregations_total.clear()
    profile_degraded_fetches_total.clear()


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine for isolated tests."""

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return sessionmaker(bind=test_engine, future=True)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for unit tests."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient with the database dependency overridden."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class FakeSocialStore:
    """In-memory :class:`SocialStore` recording every call.

    ``failures`` maps a method name, or a ``(method, *args)`` tuple, to the
    exception that call should raise. ``gates`` maps a profile id to an event
    that ``get_profile`` waits on before answering.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, ProfileRow] = {}
        self.posts: list[PostRow] = []
        self.reactions: dict[str, list[ReactionRow]] = {}
        self.edges: list[FriendshipRow] = []
        self.bookmarks: list[BookmarkRow] = []
        self.failures: dict[object, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []

    # -- builders -----------------------------------------------------------

    def add_profile(self, user_id: str, display_name: str, **fields) -> ProfileRow:
        row = ProfileRow(
            id=user_id,
            display_name=display_name,
            bio=fields.get("bio"),
            avatar_url=fields.get("avatar_url"),
            is_public=fields.get("is_public", True),
            newsletter_subscribed=fields.get("newsletter_subscribed", False),
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
        self.profiles[user_id] = row
        return row

    def _author(self, user_id: str) -> AuthorRow | None:
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        return AuthorRow(id=profile.id, display_name=profile.display_name, avatar_url=profile.avatar_url)

    def add_post(
        self,
        post_id: str,
        user_id: str,
        *,
        minutes: int = 0,
        reactions: Iterable[object] = (),
    ) -> PostRow:
        created = BASE_TIME + timedelta(minutes=minutes)
        row = PostRow(
            id=post_id,
            user_id=user_id,
            content=f"content of {post_id}",
            image_url=None,
            created_at=created,
            updated_at=created,
        )
        self.posts.append(row)
        self.reactions[post_id] = [
            ReactionRow(id=f"{post_id}-r{index}", post_id=post_id, type=kind)
            for index, kind in enumerate(reactions)
        ]
        return row

    def add_edge(
        self, requestor_id: str, recipient_id: str, status: FriendshipStatus, *, edge_id: str | None = None
    ) -> FriendshipRow:
        row = FriendshipRow(
            id=edge_id or f"{requestor_id}->{recipient_id}",
            requestor_id=requestor_id,
            recipient_id=recipient_id,
            status=status,
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
        self.edges.append(row)
        return row

    def add_bookmark(self, user_id: str, post_id: str) -> BookmarkRow:
        row = BookmarkRow(
            id=f"bm-{user_id}-{post_id}",
            user_id=user_id,
            post_id=post_id,
            created_at=BASE_TIME,
        )
        self.bookmarks.append(row)
        return row

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    # -- SocialStore --------------------------------------------------------

    async def _enter(self, name: str, *args: object) -> None:
        self.calls.append((name, *args))
        await asyncio.sleep(0)
        failure = self.failures.get((name, *args)) or self.failures.get(name)
        if failure is not None:
            raise failure

    async def get_profile(self, user_id: str) -> ProfileRow | None:
        gate = self.gates.get(user_id)
        if gate is not None:
            await gate.wait()
        await self._enter("get_profile", user_id)
        return self.profiles.get(user_id)

    async def list_posts(self, user_id: str) -> list[PostRow]:
        await self._enter("list_posts", user_id)
        rows = [row for row in self.posts if row.user_id == user_id]
        rows.sort(key=lambda row: row.created_at, reverse=True)
        for row in rows:
            row.author = self._author(row.user_id)
        return rows

    async def list_reactions(self, post_id: str) -> list[ReactionRow]:
        await self._enter("list_reactions", post_id)
        return list(self.reactions.get(post_id, []))

    async def find_friendship_edge(self, requestor_id: str, recipient_id: str) -> FriendshipRow | None:
        await self._enter("find_friendship_edge", requestor_id, recipient_id)
        for row in self.edges:
            if row.requestor_id == requestor_id and row.recipient_id == recipient_id:
                return row
        return None

    async def list_friendship_edges(
        self,
        *,
        status: FriendshipStatus,
        requestor_id: str | None = None,
        recipient_id: str | None = None,
    ) -> list[FriendshipRow]:
        role = "requestor" if requestor_id is not None else "recipient"
        await self._enter("list_friendship_edges", role, status)
        matches: list[FriendshipRow] = []
        for row in self.edges:
            if row.status != status:
                continue
            if requestor_id is not None and row.requestor_id == requestor_id:
                row.recipient = self._author(row.recipient_id)
                matches.append(row)
            elif recipient_id is not None and row.recipient_id == recipient_id:
                row.requestor = self._author(row.requestor_id)
                matches.append(row)
        return matches

    async def list_bookmarks(self, user_id: str) -> list[BookmarkRow]:
        await self._enter("list_bookmarks", user_id)
        posts = {row.id: row for row in self.posts}
        rows = [row for row in self.bookmarks if row.user_id == user_id]
        for row in rows:
            post = posts.get(row.post_id)
            if post is not None:
                post.author = self._author(post.user_id)
            row.post = post
        return rows


@pytest.fixture()
def social_store() -> FakeSocialStore:
    return FakeSocialStore()
