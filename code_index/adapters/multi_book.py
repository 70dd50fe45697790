"""Adapter for code libraries that publish one book per code (American Legal style).

The jurisdiction is a set of named code volumes (Administrative, Building,
Planning, ...), each rooted at its own URL. Volumes come from configuration
when listed there, otherwise from "... Code" links on the overview page.
Each volume becomes a Title with is_code_type set.
"""

from __future__ import annotations

from urllib.parse import urlparse

from .base import BaseAdapter, Jurisdiction, Title, make_title, same_site
from ..navigation.navigator import Link, LinkPredicate
from ..normalization.text_cleaner import clean_label


def volume_namespace(url: str) -> str:
    """Path prefix shared by every page of the volume rooted at url."""
    path = urlparse(url).path
    if "/" not in path.strip("/"):
        return path.rstrip("/") + "/"
    return path.rsplit("/", 1)[0] + "/"


def is_volume_label(text: str) -> bool:
    lowered = text.lower()
    return "code" in lowered and "chapter" not in lowered


def in_volume(volume_url: str) -> LinkPredicate:
    namespace = volume_namespace(volume_url)

    def predicate(text: str, url: str) -> bool:
        return (
            same_site(url, volume_url)
            and urlparse(url).path.startswith(namespace)
            and 5 < len(text) < 200
        )

    return predicate


class MultiBookAdapter(BaseAdapter):
    """Collect chapters for each code volume of a multi-book jurisdiction."""

    platform = "multi-book"

    def volumes(self, jurisdiction: Jurisdiction) -> list[Link]:
        configured = jurisdiction.options.get("volumes") or []
        volumes = [
            Link(clean_label(v.get("name")), v.get("url", ""))
            for v in configured
            if v.get("name") and v.get("url")
        ]
        if volumes:
            return volumes

        root_url = self.normalize_url(jurisdiction)
        self.logger.debug("No configured volumes, discovering from %s", root_url)
        root = self.navigator.open(root_url, wait_for=self.settings.wait_for)
        links = self.navigator.extract_links(
            root,
            lambda text, url: (
                same_site(url, root_url) and 3 < len(text) < 250 and is_volume_label(text)
            ),
        )
        seen = set()
        discovered = []
        for link in links:
            if link.text not in seen:
                seen.add(link.text)
                discovered.append(link)
        return discovered

    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        volumes = self.volumes(jurisdiction)
        self.logger.debug("Found %d code volumes", len(volumes))

        titles = []
        for volume in volumes[: self.max_titles]:
            self.logger.debug("Loading %s...", volume.text)
            try:
                chapters = self.chapters_from(
                    volume.url,
                    in_volume(volume.url),
                    exclude_url=volume.url,
                    wait_for=self.settings.wait_for,
                    unique_names=True,
                )
            except Exception as e:
                self.logger.warning("Error scraping %s: %s", volume.text, e)
                chapters = []
            titles.append(self._record(make_title(volume, chapters, is_code_type=True)))
        return titles
