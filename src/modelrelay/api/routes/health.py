"""
Routes API pour le health check.
"""
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check avec le provider servi."""
    return {
        "status": "ok",
        "provider": getattr(request.app.state, "provider", None),
    }
