"""Adapter for platforms whose root page lists titles and chapters together (QCode style).

Nothing in the markup nests chapters under titles, so the split comes from
the link text alone and each chapter is attached to the most recent title in
link order.

American Legal code libraries use the same single page but are organized by
code volume ("Municipal Code", "Zoning Code", ...). For jurisdictions whose
upstream platform is listed in ``code_volume_sources`` (or that set the
``code_volumes`` option) the links are grouped under those volumes instead.
"""

from __future__ import annotations

import re

from .base import BaseAdapter, Jurisdiction, Title, make_title, same_site
from .hierarchy import CHAPTER, TITLE, VOLUME, build_hierarchy, build_volumes
from .multi_book import is_volume_label

TITLE_PREFIX = re.compile(r"^(title|division)", re.IGNORECASE)
VOLUME_TITLE_PREFIX = re.compile(r"^title", re.IGNORECASE)


def is_title_label(text: str) -> bool:
    return bool(TITLE_PREFIX.match(text))


def volume_entry_kind(text: str) -> str:
    if is_volume_label(text):
        return VOLUME
    if VOLUME_TITLE_PREFIX.match(text):
        return TITLE
    return CHAPTER


class FlatListAdapter(BaseAdapter):
    """Build the tree from a single undifferentiated list of links."""

    platform = "flat-list"

    def uses_code_volumes(self, jurisdiction: Jurisdiction) -> bool:
        if "code_volumes" in jurisdiction.options:
            return bool(jurisdiction.options["code_volumes"])
        return jurisdiction.source_platform in self.settings.code_volume_sources

    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        root_url = self.normalize_url(jurisdiction)
        root = self.navigator.open(root_url, wait_for=self.settings.wait_for)
        links = self.navigator.extract_links(
            root,
            lambda text, url: same_site(url, root_url) and 3 < len(text) < 250,
        )

        seen = set()
        unique = []
        for link in links:
            if link.text in seen:
                continue
            seen.add(link.text)
            unique.append(link)
        self.logger.debug("Found %d TOC entries", len(unique))

        if self.uses_code_volumes(jurisdiction):
            items = [(link, volume_entry_kind(link.text)) for link in unique]
            titles = build_volumes(items, self.max_titles, self.max_chapters)
            if not titles and unique:
                self.logger.info(
                    "No code volumes for %s, keeping a flat list", jurisdiction.name
                )
                titles = [make_title(link) for link in unique[: self.max_chapters]]
        else:
            items = [(link, is_title_label(link.text)) for link in unique]
            titles = build_hierarchy(items, self.max_titles, self.max_chapters)

        for title in titles:
            self._record(title)
        return titles
