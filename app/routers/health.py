"""Health check endpoints."""

from fastapi import APIRouter, Depends

from app.dependencies import get_portal
from app.portal import Portal

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(portal: Portal = Depends(get_portal)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "medicore-hms",
        "version": "0.1.0",
        "remote_sync": portal.sync is not None and portal.sync.is_live,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check for Kubernetes/Docker."""
    return {"status": "ready"}
