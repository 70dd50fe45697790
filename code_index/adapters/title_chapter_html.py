"""Adapter for static, server-rendered code sites (Code Publishing style).

The root page links each "Title N ..." page; each title page links its
chapters. Sites that do not follow the Title pattern fall back to a flat list
of whatever code links the root page has.
"""

from __future__ import annotations

import re

from .base import BaseAdapter, Jurisdiction, Title, make_title, same_site
from ..navigation.navigator import LinkPredicate

TITLE_LINK = re.compile(r"^Title\s+\d+", re.IGNORECASE)
CHAPTER_NUMBER = re.compile(r"^\d+\.\d+")
ARTICLE = re.compile(r"^Article", re.IGNORECASE)


def is_chapter_label(text: str) -> bool:
    return (
        "chapter" in text.lower()
        or bool(CHAPTER_NUMBER.match(text))
        or bool(ARTICLE.match(text))
    )


def chapter_links_on(site_url: str) -> LinkPredicate:
    def predicate(text: str, url: str) -> bool:
        return same_site(url, site_url) and 5 < len(text) < 250 and is_chapter_label(text)

    return predicate


class TitleChapterHtmlAdapter(BaseAdapter):
    """Titles from the root page, chapters from each title page."""

    platform = "title-chapter-html"

    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        root_url = self.normalize_url(jurisdiction)
        root = self.navigator.open(root_url)
        title_links = self.navigator.extract_links(
            root,
            lambda text, url: same_site(url, root_url) and bool(TITLE_LINK.match(text)),
        )
        self.logger.debug("Found %d title links", len(title_links))

        if title_links:
            return self.walk_titles(title_links, chapter_links_on(root_url), unique_names=True)

        # No Title-prefixed links: keep a flat list rather than nothing
        fallback = self.navigator.extract_links(
            root,
            lambda text, url: (
                same_site(url, root_url) and ".html" in url and 5 < len(text) < 250
            ),
        )
        seen = set()
        titles = []
        for link in fallback:
            if link.text in seen:
                continue
            seen.add(link.text)
            titles.append(self._record(make_title(link)))
            if len(titles) >= self.max_chapters:
                break
        if titles:
            self.logger.info(
                "No title links for %s, kept %d flat entries", jurisdiction.name, len(titles)
            )
        return titles
