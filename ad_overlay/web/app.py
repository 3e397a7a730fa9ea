"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from ad_overlay.pipeline import Pipeline
from ad_overlay.web.routes import create_router


def create_app(pipeline: Pipeline) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Smart Ad Overlay", version="0.1.0")
    app.include_router(create_router(pipeline))
    return app
