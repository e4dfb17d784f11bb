# routers/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .guard import router as guard_router
from .agencies import router as agencies_router
from .admin_agencies import router as admin_agencies_router
from .health import router as health_router


# Master router, mounted by main.create_app()
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(guard_router)
api_router.include_router(agencies_router)
api_router.include_router(admin_agencies_router)
api_router.include_router(health_router)

__all__ = ["api_router"]
