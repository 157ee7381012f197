"""Uvicorn server runner for the podcast-trends API."""

from __future__ import annotations

import sys

from pydantic import ValidationError

from podcast_trends.config import Settings, format_validation_error
from podcast_trends.logging import configure_logging


def run_server(settings: Settings) -> None:
    """Run uvicorn with settings-backed host/port values."""
    import uvicorn

    from podcast_trends.api.app import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
    )


def main() -> None:
    """Console entry point: load settings, configure logging, serve."""
    try:
        settings = Settings.load()
    except ValidationError as exc:
        print(format_validation_error(exc), file=sys.stderr)
        raise SystemExit(2) from exc

    configure_logging(
        level=settings.logging.level,
        fmt=settings.logging.format,
        log_file=settings.logging.file,
    )
    run_server(settings)
