"""
FastAPI application entry point.
Sets up the API with lifespan events for client initialization.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import settings
from app.api.router import api_router
from app.middleware.metrics_middleware import MetricsMiddleware
from app.schemas.upload import RootResponse
from app.services.notification_service import EmailNotifier
from app.services.upload_service import UploadService
from app.storage.base import StorageClient
from app.storage.drive_client import GoogleDriveClient, UnconfiguredStorageClient
from app.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def build_storage_client() -> StorageClient:
    """
    Create the Google Drive client from settings.

    Outside production a missing or broken key file does not stop the app;
    uploads fail with a storage error instead.
    """
    try:
        return GoogleDriveClient.from_settings(settings)
    except (ValueError, OSError) as e:
        if settings.environment == "production":
            raise
        logger.error(f"Google Drive client initialization failed: {e}")
        return UnconfiguredStorageClient(str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging, build storage and email clients
    - Shutdown: Nothing to release
    """
    # Configure structured JSON logging
    configure_logging('memories-api', settings.log_level)

    # Startup
    storage = build_storage_client()
    notifier = EmailNotifier.from_settings(settings)
    app.state.upload_service = UploadService.from_settings(settings, storage, notifier)
    logger.info(f"Server listening on port {settings.port}")

    yield


# Create FastAPI app
app = FastAPI(
    title="Düğün Anıları API",
    description="Relays wedding photo and audio uploads to Google Drive",
    version=settings.api_version,
    lifespan=lifespan
)

# CORS middleware (guest site is served from another origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

# Include API routes
app.include_router(api_router)


@app.get("/", response_model=RootResponse)
async def root():
    """Root endpoint."""
    return RootResponse(
        message="Düğün Anıları API",
        version=settings.api_version,
        endpoints={
            "upload": "/upload",
            "health": "/health"
        }
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def run():
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
