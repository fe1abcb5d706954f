"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...services.routing.service import get_routing_client

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Check the external routing service, if one is configured."""
    client = get_routing_client()
    if client is None:
        return {"service": "routing", "configured": False, "healthy": False}
    return {"service": "routing", "configured": True, "healthy": client.check_health()}
