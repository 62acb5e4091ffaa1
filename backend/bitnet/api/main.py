"""
FastAPI Application Configuration

This module contains the main FastAPI application setup with:
- Logging configuration
- CORS middleware
- API routes
- Error handling

Settings come from the environment:
- BITNET_CORS_ORIGINS: comma separated allowed origins (default "*")
- BITNET_LOG_LEVEL: logging level name (default "INFO")
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__


def _cors_origins() -> List[str]:
    raw = os.environ.get("BITNET_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# Configure logging
logging.basicConfig(
    level=os.environ.get("BITNET_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events"""
    logger.info("Starting BitNet Card Game API %s...", __version__)
    yield
    logger.info("Shutting down with %d game(s) in memory", len(games.games_store))


# =============================================================================
# Create FastAPI Application
# =============================================================================

app = FastAPI(
    title="BitNet Card Game API",
    description="""
    API for BitNet - a two-player network-building card game against a
    priority-weighted computer opponent.

    ## Features
    - Create and manage game sessions
    - One endpoint per player action (equipment, attacks, resolutions,
      classifications, audits, head-hunter battles)
    - Computer opponent turns and decision debugging
    - Game log and event history
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# =============================================================================
# CORS Configuration
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Import and Include Routers
# =============================================================================

from .routes import ai, games  # noqa: E402

app.include_router(games.router, prefix="/api/games", tags=["Games"])
app.include_router(ai.router, prefix="/api/ai", tags=["AI"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint with welcome message and links"""
    return {
        "message": "Welcome to the BitNet Card Game API",
        "version": __version__,
        "documentation": "/api/docs",
        "health": "/health",
        "endpoints": {
            "games": "/api/games",
            "ai": "/api/ai",
        }
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "bitnet-card-game-api",
        "version": __version__
    }


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle all unhandled exceptions"""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500
        }
    )
