"""Adapter for Angular-rendered single-page code trees (Municode library).

Every table-of-contents entry is a ``nodeId=`` link. The root page lists both
titles and chapters; titles are picked out by name, then each title page is
visited for its own chapter links.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .base import BaseAdapter, Jurisdiction, Title
from ..navigation.navigator import Link
from ..normalization.text_cleaner import clean_label

TITLE_PREFIX = re.compile(r"^(title|division|part|appendix)\b", re.IGNORECASE)
ALL_CAPS = re.compile(r"^[A-Z][A-Z\s]+$")


def is_title_label(text: str) -> bool:
    """Title-level when prefixed Title/Division/Part/Appendix or all caps."""
    return bool(TITLE_PREFIX.match(text) or ALL_CAPS.match(text[:20]))


def is_node_link(text: str, url: str) -> bool:
    return "nodeId=" in url and len(text) > 3


def is_chapter_link(text: str, url: str) -> bool:
    return "nodeId=" in url and 3 < len(text) < 250


class TreeNavAdapter(BaseAdapter):
    """Walk a nodeId-addressed code tree: titles from the root, chapters per title."""

    platform = "tree-nav"

    def normalize_url(self, jurisdiction: Jurisdiction) -> str:
        url = jurisdiction.base_url
        default_path = self.settings.default_path
        parsed = urlparse(url)
        if default_path and "municode" in parsed.netloc and "/codes/" not in parsed.path:
            url = url.rstrip("/") + "/" + default_path.strip("/")
        return url

    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        root_url = self.normalize_url(jurisdiction)
        self.logger.debug("Loading TOC from %s", root_url)

        root = self.navigator.open(root_url)
        entries = [
            Link(clean_label(link.text, 250), link.url)
            for link in self.navigator.extract_links(root, is_node_link)
        ]
        self.logger.debug("Found %d initial TOC entries", len(entries))

        title_links = [
            Link(clean_label(link.text, 200), link.url)
            for link in entries
            if is_title_label(link.text)
        ]
        self.logger.debug("Found %d titles to process", len(title_links))

        return self.walk_titles(title_links, is_chapter_link)
