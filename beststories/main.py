"""
Best Stories API

Thin FastAPI backend serving Hacker News best stories through an
in-memory read-through cache.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from beststories.config import get_settings
from beststories.middleware import (
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    configure_logging,
)
from beststories.routers import best_stories
from beststories.services.best_stories import (
    BestStoriesService,
    get_best_stories_service,
    reset_best_stories_service,
)
from beststories.services.http_client import close_shared_client

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    configure_logging(settings.log_level)
    logger.info(
        "Starting best stories API (upstream %s, environment %s)",
        settings.hacker_news_base_url,
        settings.environment,
    )
    yield
    reset_best_stories_service()
    await close_shared_client()


app = FastAPI(
    title="Best Stories API",
    description="Hacker News best stories behind an in-memory read-through cache",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# Request ID
app.add_middleware(RequestIDMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Routers
app.include_router(best_stories.router, prefix="/api")


@app.get("/api/health")
async def health_check(
    service: BestStoriesService = Depends(get_best_stories_service),
) -> dict[str, Any]:
    """Health check with cache occupancy."""
    return {
        "status": "ok",
        "service": "best-stories-api",
        "version": "0.1.0",
        "cache_entries": len(service.cache),
    }
