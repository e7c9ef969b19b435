"""
Structured logging setup for the product scraper.

All runtime logging goes through structlog. The scraper and every side
tool call `configure_logging` once at startup; modules obtain loggers via
`get_logger(__name__)` and emit snake_case events with keyword fields.

Context (site, url, tool) is bound per run with `bind_request_context` so
that every event emitted while scraping a site carries it.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog


def _build_shared_processors(log_format: str = "json") -> list[structlog.types.Processor]:
    """
    Processors shared by the scraper and the tools.

    The renderer is the only part that differs between formats.
    """

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        timestamper,
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend(
            [
                structlog.processors.EventRenamer("message"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ]
        )
    return processors


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_stdout: bool = True,
    log_format: str = "json",
) -> None:
    """
    Configure structlog and the standard logging module.

    - When log_stdout is True (default), a StreamHandler(sys.stdout) is added.
    - When log_file is set, a FileHandler is added (parent dir created if needed).
    - At least one handler is always added: if both log_stdout=False and log_file
      is unset, stdout is used as fallback so the process never has zero handlers.
    """

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if log_stdout:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(level)
        stdout_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(stdout_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(file_handler)

    if not root.handlers:
        fallback = logging.StreamHandler(sys.stdout)
        fallback.setLevel(level)
        fallback.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(fallback)

    structlog.configure(
        processors=_build_shared_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_config(config: Any) -> None:
    """Configure logging from an `AppConfig` (level name, file, stdout, format)."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    configure_logging(
        level=level,
        log_file=config.log_file,
        log_stdout=config.log_stdout,
        log_format=config.log_format,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Obtain a structured logger.

    Usage:
        from shared.logging import get_logger, bind_request_context

        logger = get_logger(__name__)
        bind_request_context(site="usasnackshop", url="https://...")
        logger.info("site_scrape_started")
    """

    # If configure_logging() has not been called yet, fall back to a
    # minimal configuration to avoid silent failures.
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_request_context(
    *,
    site: Optional[str] = None,
    url: Optional[str] = None,
    tool: Optional[str] = None,
    **extra: Any,
) -> Mapping[str, Any]:
    """
    Bind common context fields for scrape / tool logging.

    Keys with None values are dropped to keep logs concise.
    """

    context: dict[str, Any] = {
        "site": site,
        "url": url,
        "tool": tool,
        **extra,
    }
    filtered_context = {k: v for k, v in context.items() if v is not None}

    structlog.contextvars.bind_contextvars(**filtered_context)
    return filtered_context


def clear_request_context() -> None:
    """Drop all bound context vars (between sites)."""
    structlog.contextvars.clear_contextvars()
