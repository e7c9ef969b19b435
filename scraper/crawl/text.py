"""
Text normalization for scraped fields (whitespace collapse, trim).
"""

from __future__ import annotations

import re
from typing import Optional


def normalize_whitespace(text: Optional[str]) -> str:
    """Normalize whitespace: collapse multiples, trim. None becomes ''."""
    if not text:
        return ""
    # Collapse multiple whitespace (incl. newlines inside price blocks) to single space
    text = re.sub(r"\s+", " ", text)
    return text.strip()
