"""Monitoring helpers and metric registry for the backend."""

from . import metrics, registry

__all__ = ["metrics", "registry"]
