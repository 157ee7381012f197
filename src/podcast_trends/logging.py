"""structlog configuration and request-scoped logging context.

Provides request ID generation, a request-level logging context manager,
and structured log configuration for console and JSON output with
optional file logging.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

# ---------------------------------------------------------------------------
# Request ID
# ---------------------------------------------------------------------------


def generate_request_id() -> str:
    """Generate a short identifier for one inbound request."""
    return uuid.uuid4().hex[:12]


# ---------------------------------------------------------------------------
# structlog configuration
# ---------------------------------------------------------------------------


_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Libraries that log one INFO line per outbound request or connection.
_CHATTY_LOGGERS = ("httpx", "httpcore", "google_genai", "websockets")

# uvicorn installs its own handlers; they are cleared so records reach root.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _numeric_level(level: str) -> int:
    level_upper = level.upper()
    if level_upper not in _VALID_LEVELS:
        msg = f"Invalid log level: {level!r}. Must be one of {sorted(_VALID_LEVELS)}"
        raise ValueError(msg)
    return int(getattr(logging, level_upper))


def _build_renderer(fmt: str) -> list[structlog.types.Processor]:
    if fmt == "json":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer()]


def _build_handlers(log_file: str | Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(str(log_file), encoding="utf-8"))
    return handlers


def configure_logging(
    level: str = "INFO",
    fmt: str = "console",
    log_file: str | Path | None = None,
) -> None:
    """Send structlog and stdlib records (uvicorn, httpx) through one formatter.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: ``"console"`` for development or ``"json"`` for one object per
            line. JSON output keeps Japanese text unescaped and renders
            tracebacks as structured fields.
        log_file: Optional file that receives the same records as stderr.

    Outbound HTTP libraries are held at WARNING unless ``level`` is DEBUG,
    so each catalog or translation call does not add its own line.

    Raises:
        ValueError: If ``level`` is not a recognized log level.
    """
    numeric_level = _numeric_level(level)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_build_renderer(fmt),
        ],
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
        old.close()
    for handler in _build_handlers(log_file):
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


# ---------------------------------------------------------------------------
# Request logging context manager
# ---------------------------------------------------------------------------


@contextmanager
def request_logging_context(
    operation: str,
    request_id: str | None = None,
    **extra: Any,
) -> Iterator[structlog.stdlib.BoundLogger]:
    """Bind request-level metadata to structlog for the duration of a block.

    Logs request start and completion, and binds the operation name and
    request ID to all log entries emitted inside the context.

    Args:
        operation: Name of the operation being served (e.g. ``"tts"``).
        request_id: Optional request ID; generated when omitted.
        **extra: Additional key-value pairs to bind.

    Yields:
        A bound structlog logger with request context.

    Example::

        with request_logging_context("tts", episode_id=episode_id) as log:
            log.info("synthesis_requested")
    """
    rid = request_id or generate_request_id()
    structlog.contextvars.bind_contextvars(
        operation=operation,
        request_id=rid,
        **extra,
    )

    log: structlog.stdlib.BoundLogger = structlog.get_logger(operation)
    log.info("request_start")

    try:
        yield log
    except Exception:
        log.exception("request_error")
        raise
    finally:
        log.info("request_end")
        structlog.contextvars.unbind_contextvars(
            "operation", "request_id", *extra.keys()
        )
