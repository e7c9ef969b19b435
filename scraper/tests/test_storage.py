"""
Unit tests for output path building and the JSON writer.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from scraper.storage import build_output_path, timestamp_slug, tool_output_dir, url_domain, write_json


def test_timestamp_slug_is_utc_without_colons():
    now = datetime(2026, 10, 19, 10, 4, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert timestamp_slug(now) == "2026-10-19T08-04-05"


def test_url_domain():
    assert url_domain("https://Shop.Example.com:8443/a?b=1") == "shop.example.com"
    assert url_domain("not a url") == "unknown-domain"


def test_build_output_path_with_suffix(tmp_path):
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    path = build_output_path(tmp_path, "https://example.com/x", ext="png", suffix="_-hero", now=now)
    assert path == tmp_path / "example.com_2026-01-02T03-04-05_-hero.png"
    assert not path.exists()


def test_tool_output_dir():
    assert tool_output_dir("results", "screenshots") == Path("results") / "screenshots"


def test_write_json_creates_dirs_and_returns_size_and_checksum(tmp_path):
    path = tmp_path / "nested" / "out.json"
    data = {"when": datetime(2026, 1, 1, tzinfo=timezone.utc), "path": Path("a")}
    size, checksum = write_json(path, data)

    raw = path.read_bytes()
    assert size == len(raw)
    assert checksum == hashlib.md5(raw).hexdigest()
    loaded = json.loads(raw)
    assert loaded["when"] == "2026-01-01T00:00:00+00:00"
    assert loaded["path"] == "a"


def test_write_json_rejects_unsupported_types(tmp_path):
    with pytest.raises(TypeError, match="set"):
        write_json(tmp_path / "out.json", {"tags": {"a"}})
