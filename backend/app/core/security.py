"""Session identity helpers built on externally issued bearer tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Protocol

import jwt
from fastapi import HTTPException, status

from app.config import get_settings

settings = get_settings()


@dataclass(slots=True, frozen=True)
class SessionIdentity:
    """Identity of the acting viewer as asserted by the auth provider."""

    user_id: str
    email: str | None = None


class SessionError(Exception):
    """Raised when the current session cannot be determined."""


class SessionProvider(Protocol):
    """Source of the acting viewer's session."""

    async def get_session(self) -> SessionIdentity | None:
        """Return the current session, ``None`` when nobody is signed in."""


class StaticSessionProvider:
    """Session provider returning an identity resolved ahead of time."""

    def __init__(self, identity: SessionIdentity | None) -> None:
        self._identity = identity

    async def get_session(self) -> SessionIdentity | None:
        return self._identity


def create_access_token(data: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT access token with an expiration time."""

    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT access token."""

    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:  # pragma: no cover - simple error mapping
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired") from exc
    except jwt.InvalidTokenError as exc:  # pragma: no cover - simple error mapping
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc
    return payload


def session_from_token(token: str) -> SessionIdentity:
    """Resolve a session identity from a bearer token or raise HTTP 401."""

    payload = decode_access_token(token)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    email = payload.get("email")
    return SessionIdentity(user_id=str(sub), email=email if isinstance(email, str) else None)
