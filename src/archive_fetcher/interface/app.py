"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from archive_fetcher.infrastructure.config import Settings, get_settings
from archive_fetcher.infrastructure.http import build_client
from archive_fetcher.interface.dependencies import build_registry
from archive_fetcher.interface.error_handlers import register_error_handlers
from archive_fetcher.interface.routes import router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and wire the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Own the shared HTTP client and the registry built on it."""
        client = build_client(settings.http_timeout)
        app.state.registry = build_registry(settings, client)
        try:
            yield
        finally:
            client.close()

    app = FastAPI(
        title="Forge Archive Fetcher",
        version="1.0.0",
        description=(
            "Resolves GitHub / GitLab repository addresses to commits and "
            "serves content-addressed snapshots of their trees."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    # ── Health check (simple liveness probe) ────────────────────────────

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
