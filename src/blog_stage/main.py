# src/blog_stage/main.py
"""Main entry point for the Blog Stage application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from blog_stage.api.errors import register_exception_handlers
from blog_stage.api.v1 import (
    admin_router,
    auth_router,
    posts_router,
    tickets_router,
    users_router,
)
from blog_stage.core.logging import configure_logging
from blog_stage.core.settings import settings
from blog_stage.db.session import create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    create_tables()
    if settings.master_password_enabled:
        logger.warning(
            "Super admin master password is configured (bootstrap only: %s)",
            settings.master_password_bootstrap_only,
        )
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Blog Stage API",
    description="Blogging API with role-based administration and soft-delete workflows",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_exception_handlers(app)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(tickets_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("blog_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
