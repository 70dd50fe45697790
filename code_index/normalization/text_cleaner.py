"""Text cleaning utilities for link labels."""

import html
import re


def normalize_whitespace(text: str) -> str:
    """Collapse all runs of whitespace (including newlines) to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def clean_label(text: str | None, max_length: int | None = None) -> str:
    """Decode entities, collapse whitespace and optionally truncate a label."""
    if not text:
        return ""
    text = normalize_whitespace(html.unescape(text))
    if max_length is not None:
        text = text[:max_length].rstrip()
    return text
