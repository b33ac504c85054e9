"""FastAPI application factory for the day score JSON API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from vibe.dashboard.routes import api


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to wire the orchestrator onto ``app.state``.

    Returns:
        Configured FastAPI application with the JSON routes under ``/api``.
    """
    app = FastAPI(
        title="Dagens Vibe",
        lifespan=lifespan,
    )
    app.include_router(api.router, prefix="/api")
    return app
