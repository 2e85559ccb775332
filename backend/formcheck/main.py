"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formcheck import __version__
from formcheck.config import get_settings
from formcheck.api import api_router
from formcheck.engine import EXERCISES

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} with {len(EXERCISES)} exercises")
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="""
    Real-time Exercise Form Analysis API

    Consumes body-landmark frames from a client-side pose model and returns
    rep counts plus form feedback.

    ## Flow

    1. `POST /analyzers` to get an analyzer id
    2. `PUT /analyzers/{id}/session` with an exercise id
    3. `POST /analyzers/{id}/frames` once per processed video frame
    4. `GET /analyzers/{id}/feedback` for the per-rep feedback log

    Each completed rep carries the single worst form issue observed during
    that rep, or a "good rep" message when none was seen.
    """,
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": "/health"
    }
