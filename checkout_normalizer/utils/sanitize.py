"""Sanitization applied to posted field values before case conversion."""

from __future__ import annotations

import re
from typing import Any

SCRIPT_STYLE_BLOCKS = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
HTML_TAGS = re.compile(r"<[^>]*>")


def decode_value(value: bytes) -> str:
    """Decode raw bytes as UTF-8, reading them as Latin-1 when that fails."""
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


def strip_tags(value: str) -> str:
    value = SCRIPT_STYLE_BLOCKS.sub("", value)
    return HTML_TAGS.sub("", value)


def sanitize_text(value: Any) -> str:
    """Return a plain, trimmed string; anything that is not text becomes ''."""
    if isinstance(value, bytes):
        value = decode_value(value)
    if not isinstance(value, str):
        return ""
    return strip_tags(value).strip()
