"""
Main FastAPI application for the SaveZar taxi-fleet dashboard.
Serves the REST API the mobile web client polls.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from app.core.config import Settings, settings as default_settings
from app.core.errors import register_error_handlers
from app.core.logging import setup_logging
from app.api.v1.api import api_router
from app.api.v1.schemas import HealthResponse
from app.services.telemetry import SimulatedTelemetry, TelemetrySource
from app.storage.base import BaseStorage
from app.storage.factory import build_storage

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    logger.info("Starting SaveZar Fleet API...")

    storage: BaseStorage = app.state.storage
    await storage.initialize()
    purged = await storage.purge_expired_sessions()
    if purged:
        logger.info(f"Removed {purged} expired sessions")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await storage.close()

def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BaseStorage] = None,
    telemetry: Optional[TelemetrySource] = None,
) -> FastAPI:
    """Build the application with its collaborators injected."""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Taxi-fleet monitoring API: taxis, drivers, statistics and broadcast recordings",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.storage = storage or build_storage(settings)
    app.state.telemetry = telemetry or SimulatedTelemetry()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs"
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="savezar-fleet-api",
            storage=app.state.storage.backend_name,
        )

    return app

# Setup logging
setup_logging()

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.is_development(),
        log_level=default_settings.LOG_LEVEL.lower()
    )
