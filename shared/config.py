"""
Environment-based configuration for the product scraper.

This module exposes a small, typed configuration surface shared by the
site scraper and the side tools (screenshot, performance, visual diff,
AJAX monitor). All values are sourced from environment variables with
sensible defaults; CLI entry points load `.env` via python-dotenv first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional

Environment = Literal["local", "dev", "staging", "prod"]
LogFormat = Literal["json", "console"]


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level application configuration.

    Scrape parameters per site live in `scraper.sites`; this config only
    holds the process-wide knobs.
    """

    environment: Environment
    log_level: str

    # Optional file path for structured logs; when set, logs are written
    # to file (and stdout if log_stdout).
    log_file: Optional[str]
    log_stdout: bool
    log_format: LogFormat

    # Output root; each tool writes to its own subdirectory.
    results_dir: str
    # JSON file replacing the built-in site table.
    sites_config_path: Optional[str]

    headless: bool

    # Records per output file (result chunking) and whether ids are rewritten 1..n.
    # None means "use the site table's global settings".
    product_limit: Optional[int]
    reindex_products: Optional[bool]

    nav_timeout_ms: int
    wait_selector_timeout_ms: int

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Construct configuration from environment variables."""

        environment = os.getenv("APP_ENV", "local")
        if environment not in {"local", "dev", "staging", "prod"}:
            raise ValueError(f"Unsupported APP_ENV value: {environment!r}")

        log_format = (os.getenv("LOG_FORMAT") or "console").strip().lower()
        if log_format not in {"json", "console"}:
            raise ValueError(f"Unsupported LOG_FORMAT value: {log_format!r}")

        def _bool_env(name: str, default: bool) -> bool:
            raw = (os.getenv(name) or str(default)).strip().lower()
            return raw in ("true", "1", "yes")

        def _optional_bool_env(name: str) -> Optional[bool]:
            raw = (os.getenv(name) or "").strip().lower()
            if not raw:
                return None
            return raw in ("true", "1", "yes")

        def _optional_int_env(name: str, minimum: int) -> Optional[int]:
            raw = (os.getenv(name) or "").strip()
            try:
                return max(minimum, int(raw)) if raw else None
            except ValueError:
                return None

        def _int_env(name: str, default: int, minimum: int = 0) -> int:
            raw = (os.getenv(name) or "").strip()
            if not raw:
                return default
            try:
                value = int(raw)
            except ValueError:
                return default
            return max(minimum, value)

        return cls(
            environment=environment,  # type: ignore[arg-type]
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_stdout=_bool_env("LOG_STDOUT", True),
            log_format=log_format,  # type: ignore[arg-type]
            results_dir=os.getenv("RESULTS_DIR", "./results"),
            sites_config_path=os.getenv("SITES_CONFIG") or None,
            headless=_bool_env("HEADLESS", True),
            product_limit=_optional_int_env("PRODUCT_LIMIT", minimum=1),
            reindex_products=_optional_bool_env("REINDEX_PRODUCTS"),
            nav_timeout_ms=_int_env("NAV_TIMEOUT_MS", 60_000, minimum=1000),
            wait_selector_timeout_ms=_int_env("WAIT_SELECTOR_TIMEOUT_MS", 60_000, minimum=1000),
        )


def get_config() -> AppConfig:
    """
    Helper to obtain the current configuration.

    Scripts call this once at startup and pass the instance explicitly.
    """

    return AppConfig.from_env()
