"""
Pytest configuration shared by the scraper tests.
"""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def clear_log_context():
    """Bound log context (site, url, tool) must not leak between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
