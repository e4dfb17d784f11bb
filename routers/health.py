# routers/health.py

from fastapi import APIRouter
from core.config import settings
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + agencies query
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
async def health_db():
    """
    Verifies Supabase connectivity.
    Safe for external health monitors (no auth required).
    """
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "env": settings.ENV,
        "status": "ok",
    }
