"""Assemble classified link sequences into a Title -> Chapter tree."""

from __future__ import annotations

from typing import Iterable

from .base import Title, make_chapter, make_title
from ..navigation.navigator import Link


def build_hierarchy(
    items: Iterable[tuple[Link, bool]],
    max_titles: int | None = None,
    max_chapters: int | None = None,
) -> list[Title]:
    """Group (link, is_title) pairs into titles in input order.

    Chapters attach to the most recently opened title. A chapter seen before
    any title becomes a top-level title with no chapters. Titles past
    max_titles are not opened and their chapters are dropped; chapters past
    max_chapters within a title are dropped.
    """
    titles: list[Title] = []
    current: Title | None = None
    opened = 0
    skipping = False

    for link, is_title in items:
        if is_title:
            if max_titles is not None and opened >= max_titles:
                current = None
                skipping = True
                continue
            current = make_title(link)
            titles.append(current)
            opened += 1
            skipping = False
        elif current is not None:
            if max_chapters is None or len(current.chapters) < max_chapters:
                current.chapters.append(make_chapter(link))
        elif not skipping:
            titles.append(make_title(link))

    return titles


VOLUME = "volume"
TITLE = "title"
CHAPTER = "chapter"


def build_volumes(
    items: Iterable[tuple[Link, str]],
    max_titles: int | None = None,
    max_chapters: int | None = None,
) -> list[Title]:
    """Group (link, kind) pairs under code volumes; kind is VOLUME, TITLE or CHAPTER.

    Each volume opens a Title with is_code_type set, and every following
    title or chapter link becomes one of its entries. A title link seen
    before any volume is a top-level title with no chapters; chapter links
    seen before any volume are dropped. Top-level entries past max_titles are
    skipped along with everything under them.
    """
    titles: list[Title] = []
    current: Title | None = None

    for link, kind in items:
        top_level = kind == VOLUME or (kind == TITLE and current is None)
        if top_level:
            if max_titles is not None and len(titles) >= max_titles:
                current = None
                continue
            if kind == VOLUME:
                current = make_title(link, is_code_type=True)
                titles.append(current)
            else:
                titles.append(make_title(link))
        elif current is not None:
            if max_chapters is None or len(current.chapters) < max_chapters:
                current.chapters.append(make_chapter(link))

    return titles
