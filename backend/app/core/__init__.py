"""Core utilities for the storefront social backend."""

from .security import SessionError, SessionIdentity, SessionProvider, StaticSessionProvider

__all__ = ["SessionError", "SessionIdentity", "SessionProvider", "StaticSessionProvider"]
