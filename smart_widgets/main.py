"""
FastAPI application factory + lifespan.

This is the **widget engine** behind the smart dashboard:
- REST API for widget creation, rendering, stat cards and simulation.
- Column metadata cached per selected table.
- CORS configured for the dashboard frontend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smart_widgets.core.cache import column_cache
from smart_widgets.core.config import settings
from smart_widgets.api.v1 import api_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: configure logging (widgets load on first request).
    Shutdown: drop cached column metadata.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"[App] Starting {settings.APP_NAME} ({settings.APP_ENV})")
    logger.info(f"[App] Aggregation backend at {settings.backend_url('')}")

    yield

    column_cache.invalidate()
    logger.info("[App] Shut down")


def create_fastapi_app() -> FastAPI:
    """Application factory for FastAPI."""
    app = FastAPI(
        title="Smart Widgets API",
        description="Widget configuration and rendering engine for the dashboard",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": VERSION,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    return app


# Module-level instance for ``uvicorn smart_widgets.main:app``
app = create_fastapi_app()
