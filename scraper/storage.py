"""
Local disk storage helpers: output paths and the JSON writer.

Tool outputs follow the naming convention {domain}_{timestamp}{suffix}.{ext}
under results_dir/<tool>/, where timestamp is ISO-8601 UTC to the second
with ':' replaced by '-'.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Optional
from urllib.parse import urlparse

from shared.logging import get_logger

logger = get_logger(__name__)

ToolName = Literal["screenshots", "performance", "visual-regression", "requests"]


def timestamp_slug(now: Optional[datetime] = None) -> str:
    """UTC timestamp safe for file names, e.g. 2026-10-19T08-04-05."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


def url_domain(url: str) -> str:
    """Host part of a URL (lowercase); unknown-domain when absent."""
    host = (urlparse(url).hostname or "").strip().lower()
    return host or "unknown-domain"


def tool_output_dir(results_dir: str | Path, tool: ToolName) -> Path:
    return Path(results_dir) / tool


def build_output_path(
    output_dir: str | Path,
    url: str,
    *,
    ext: str,
    suffix: str = "",
    now: Optional[datetime] = None,
) -> Path:
    """
    Build {output_dir}/{domain}_{timestamp}{suffix}.{ext}.

    Returns a Path object (does not create the file or directory).
    """
    return Path(output_dir) / f"{url_domain(url)}_{timestamp_slug(now)}{suffix}.{ext}"


def ensure_parent_dir(path: Path) -> None:
    """Ensure the directory for an output path exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


def _json_default(obj: Any) -> Any:
    """JSON serializer for datetime and Path."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> tuple[int, str]:
    """
    Write JSON data to disk (UTF-8, pretty-printed, non-ASCII kept).

    Returns (size_bytes, checksum). May raise OSError on write failure.
    """
    ensure_parent_dir(path)
    json_bytes = json.dumps(data, indent=2, ensure_ascii=False, default=_json_default).encode(
        "utf-8"
    )
    path.write_bytes(json_bytes)
    return len(json_bytes), hashlib.md5(json_bytes).hexdigest()
