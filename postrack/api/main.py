"""
postrack API - Main FastAPI Application.

Serves the bulk tracking endpoints that back the tracking dashboard.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from postrack import __version__
from postrack.config import get_settings
from postrack.tracker.batch import BatchTracker
from postrack.utils.logging import setup_logging

# Configure logging early
setup_logging("postrack-api")

logger = logging.getLogger(__name__)


def build_tracker() -> BatchTracker:
    """Create the batch tracker from environment settings."""
    return BatchTracker.from_settings(get_settings())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    settings = get_settings()
    logger.info("Starting postrack API (courier=%s)", settings.courier)
    if not settings.has_api_key:
        logger.warning(
            "BinderByte API key not found; set BINDERBYTE_API_KEY to enable tracking"
        )

    app.state.tracker = build_tracker()

    yield

    await app.state.tracker.shutdown()
    logger.info("Shutting down postrack API")


OPENAPI_TAGS = [
    {
        "name": "batch",
        "description": "Submit, poll, refresh and export a batch of tracking numbers",
    },
    {
        "name": "system",
        "description": "System health and information endpoints",
    },
]

app = FastAPI(
    title="postrack API",
    description=(
        "Bulk POS Indonesia parcel tracking via the BinderByte API.\n\n"
        "Tracking numbers are looked up one at a time with a fixed delay "
        "between requests. Poll `GET /api/v1/batch` for progress."
    ),
    version=__version__,
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["system"], operation_id="getServiceInfo")
async def root():
    """Return basic information about the API service."""
    return {
        "service": "postrack API",
        "version": __version__,
        "status": "operational",
        "description": "Bulk POS Indonesia parcel tracking",
    }


@app.get("/health", tags=["system"], operation_id="healthCheck")
async def health_check():
    """Check service health and whether tracking is configured."""
    return {
        "status": "healthy",
        "service": "postrack-api",
        "api_key_configured": get_settings().has_api_key,
    }


from postrack.api.routes import batch

app.include_router(batch.router, prefix="/api/v1", tags=["batch"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
