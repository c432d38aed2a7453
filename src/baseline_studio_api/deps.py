"""Request-scoped access to the baseline studio services."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .services import AppServices


def get_services(request: Request) -> AppServices:
    """Services wired by ``create_app``; 503 until the baseline store is attached."""
    services: AppServices | None = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Baseline studio services are not available")
    return services
