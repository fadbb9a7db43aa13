"""Integration tests exercising the profile endpoints via FastAPI's TestClient."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.api.deps import get_session_provider
from app.core.security import create_access_token
from app.main import app
from app.models import Friendship, FriendshipStatus, Post, Reaction, UserProfile

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def auth_headers(user_id: str, email: str | None = None) -> dict[str, str]:
    claims = {"sub": user_id}
    if email is not None:
        claims["email"] = email
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


def seed(session_factory) -> None:
    with session_factory() as db:
        db.add_all(
            [
                UserProfile(id="u2", display_name="Una", created_at=T0, updated_at=T0),
                Post(id="p1", user_id="u2", content="hello", created_at=T0, updated_at=T0),
                Post(
                    id="p2",
                    user_id="u2",
                    content="again",
                    created_at=T0 + timedelta(minutes=5),
                    updated_at=T0 + timedelta(minutes=5),
                ),
                Reaction(id="r1", post_id="p1", user_id="u1", type="like"),
                Reaction(id="r2", post_id="p1", user_id="u3", type="thumbs_down"),
                Reaction(id="r3", post_id="p1", user_id="u4", type="sparkles"),
                Friendship(
                    id="f1",
                    requestor_id="u2",
                    recipient_id="u1",
                    status=FriendshipStatus.PENDING,
                    created_at=T0,
                    updated_at=T0,
                ),
            ]
        )
        db.commit()


def test_own_profile_without_token_is_empty(client: TestClient):
    response = client.get("/api/profiles/me")

    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "empty"
    assert body["profile"] is None
    assert body["posts"] == []


def test_own_profile_is_synthesized_for_new_account(client: TestClient):
    response = client.get("/api/profiles/me", headers=auth_headers("u9", "newbie@example.com"))

    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "ready"
    assert body["is_current_user"] is True
    assert body["profile"]["display_name"] == "newbie"
    assert body["relationship"] == "none"


def test_viewing_other_profile_returns_posts_and_relationship(client: TestClient, session_factory):
    seed(session_factory)

    response = client.get("/api/profiles/u2", headers=auth_headers("u1"))

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["phase"] == "ready"
    assert body["target_id"] == "u2"
    assert body["relationship"] == "requested"
    assert [post["id"] for post in body["posts"]] == ["p2", "p1"]
    assert body["posts"][1]["reaction_counts"] == {
        "like": 1,
        "heart": 0,
        "thumbs_up": 0,
        "thumbs_down": 1,
    }
    assert body["posts"][0]["user"]["display_name"] == "Una"
    assert body["friends"] == []


def test_recipient_sees_pending_request_on_own_profile(client: TestClient, session_factory):
    seed(session_factory)

    response = client.get("/api/profiles/me", headers=auth_headers("u1", "u1@example.com"))

    body = response.json()
    assert [request["requestor"]["display_name"] for request in body["pending_requests"]] == ["Una"]
    assert body["pending_requests"][0]["recipient"] is None


def test_missing_profile_renders_not_found_state(client: TestClient):
    response = client.get("/api/profiles/ghost", headers=auth_headers("u1"))

    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "ready"
    assert body["profile"] is None
    assert body["error"] is None


def test_invalid_token_is_rejected(client: TestClient):
    response = client.get("/api/profiles/u2", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_session_failure_maps_to_service_unavailable(client: TestClient):
    class BrokenSessions:
        async def get_session(self):
            raise TimeoutError("auth provider timed out")

    app.dependency_overrides[get_session_provider] = lambda: BrokenSessions()
    response = client.get("/api/profiles/u2")

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to load profile data"


def test_metrics_expose_aggregation_phases(client: TestClient):
    client.get("/api/profiles/me")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'profile_aggregations_total{phase="empty"} 1' in response.text


def test_health_check(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
