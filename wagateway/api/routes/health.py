"""
Health check endpoint.
"""

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """
    Basic health check endpoint.

    Returns the service status, seconds since startup and the current time.
    """
    started_at = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started_at if started_at is not None else 0.0

    return {
        "status": "ok",
        "uptime": round(uptime, 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
