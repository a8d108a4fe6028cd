"""Health check endpoint."""

import os
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from booking_api import __version__

router = APIRouter(tags=["health"])


@router.get("/health", summary="Service health")
async def health() -> dict[str, Any]:
    """Report liveness, version and deployment environment."""
    return {
        "status": "healthy",
        "version": __version__,
        "environment": os.environ.get("ENVIRONMENT", "dev"),
        "timestamp": datetime.now(UTC).isoformat(),
    }
