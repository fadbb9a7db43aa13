"""Health and Prometheus-compatible metrics endpoints."""

from fastapi import APIRouter, Response

from app.config import get_settings
from app.monitoring.registry import registry

router = APIRouter(tags=["system"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok", "environment": get_settings().environment}


@router.get("/metrics", response_class=Response)
def export_metrics() -> Response:
    """Expose collected metrics for Prometheus scraping."""

    return Response(content=registry.render(), media_type="text/plain; version=0.0.4")
