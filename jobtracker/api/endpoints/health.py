"""
Liveness check. The only route that does not need an API key.
"""

from typing import Dict
from fastapi import APIRouter, status

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, bool]:
    """
    Returns 200 OK if the service is running.
    Use this for uptime monitoring and load balancer health checks.
    """
    return {"ok": True}
