"""FastAPI dependencies for the API layer."""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.security import SessionProvider, StaticSessionProvider, session_from_token
from app.database import get_db
from app.services.social_store import SocialStore, SqlAlchemySocialStore

# Tokens are issued by the external auth provider; the URL only documents
# where clients obtain them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_session_provider(token: str | None = Depends(oauth2_scheme)) -> SessionProvider:
    """Resolve the optional bearer token into a session provider.

    A missing token means an anonymous viewer; an invalid one is rejected
    with HTTP 401.
    """

    if not token:
        return StaticSessionProvider(None)
    return StaticSessionProvider(session_from_token(token))


def get_social_store(db: Session = Depends(get_db)) -> SocialStore:
    """Request scoped store over the relational backend."""

    return SqlAlchemySocialStore(db)
