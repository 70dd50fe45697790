"""Keyword categorization of code titles and chapter names."""

from __future__ import annotations

from code_index.taxonomy import TAXONOMY

_LOWERED = {
    tag: tuple(keyword.lower() for keyword in keywords)
    for tag, keywords in TAXONOMY.items()
}


def categorize(text: str | None) -> set[str]:
    """Return every topic tag with at least one keyword contained in text.

    Tags are tested independently, so one label can carry several tags.
    Empty or missing text yields an empty set.
    """
    if not text:
        return set()
    lowered = text.lower()
    return {
        tag
        for tag, keywords in _LOWERED.items()
        if any(keyword in lowered for keyword in keywords)
    }


def tag_list(text: str | None) -> list[str]:
    """Tags for text in taxonomy order (stable JSON output)."""
    tags = categorize(text)
    return [tag for tag in TAXONOMY if tag in tags]
