"""
Health check router.

Liveness endpoint for monitoring and load balancers.
"""

from fastapi import APIRouter, Depends

from backend.settings import Settings
from api.deps import get_settings

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator and runtime environment
    """
    return {"status": "ok", "environment": settings.environment}
