"""
Shared plumbing for the command-line scripts: bootstrap, URL/viewport validation, rich output.
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, NoReturn, Optional, Sequence
from urllib.parse import urlparse

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from scraper.crawl.browser import Viewport
from shared.config import AppConfig, get_config
from shared.logging import configure_logging_from_config

console = Console()
err_console = Console(stderr=True)


def bootstrap() -> AppConfig:
    """Load .env, read AppConfig and configure logging; call once per script."""
    load_dotenv()
    config = get_config()
    configure_logging_from_config(config)
    return config


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def fail(message: str) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    sys.exit(1)


def require_url(url: str) -> str:
    if not is_valid_url(url):
        fail(f"Invalid URL {url!r}: expected http(s)://host/...")
    return url


def add_viewport_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--device", help="Playwright device name, e.g. 'iPhone 13'")
    parser.add_argument("--width", type=int, help="Viewport width in px (with --height)")
    parser.add_argument("--height", type=int, help="Viewport height in px (with --width)")


def parse_viewport(width: Optional[int], height: Optional[int]) -> Optional[Viewport]:
    """{"width", "height"} when both are given, None when neither; anything else is an error."""
    if width is None and height is None:
        return None
    if width is None or height is None:
        raise ValueError("--width and --height must be given together")
    if width < 1 or height < 1:
        raise ValueError("Viewport width and height must be positive")
    return {"width": width, "height": height}


def render_table(
    title: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[object]],
) -> None:
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(str(value) for value in row))
    console.print(table)
