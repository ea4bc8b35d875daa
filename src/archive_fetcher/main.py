"""Entry point for the ``archive-fetcher`` console script."""

from __future__ import annotations

import logging

import uvicorn

from archive_fetcher.infrastructure.config import Settings, get_settings
from archive_fetcher.interface.app import create_app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(logging.WARNING, logging.getLogger().level))


def main(settings: Settings | None = None) -> None:
    """Serve the fetcher API with the configured settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
