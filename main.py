import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.errors import ProvisioningError
from core.logging_config import logger

# -------------------------------------------------
# Routers (auth, guard, agencies, admin, health)
# -------------------------------------------------
from routers import api_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Agency Portal API — tenant-scoped access for agency portals",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup logging
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENV})")
        for route in app.routes:
            methods = ",".join(getattr(route, "methods", None) or [])
            logger.debug(f"➡️ {methods:10s} {getattr(route, 'path', '')}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url.path} — {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(ProvisioningError)
    async def handle_provisioning(request: Request, exc: ProvisioningError):
        logger.warning(f"Provisioning rejected at {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(api_router)

    return app


# Create the global FastAPI instance
app = create_app()
