# src/blog_stage/api/errors.py
"""Translate domain errors into JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from blog_stage.core.errors import BlogError, PermissionDenied, UpstreamUnavailable

logger = logging.getLogger(__name__)


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Render a :class:`BlogError` as ``{"detail", "code"[, "reason"]}``."""
    if isinstance(exc, UpstreamUnavailable):
        logger.error("%s %s failed upstream during %s", request.method, request.url.path, exc.operation)
    body: dict[str, str] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, PermissionDenied):
        body["reason"] = exc.reason.value
    return JSONResponse(status_code=exc.status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, blog_error_handler)
