"""Shared fixtures: canned-HTML fetcher, fake clock, zero-delay settings."""

import pytest

from code_index.navigation.fetchers import BaseFetcher
from code_index.settings import CrawlSettings, PlatformSettings, PLATFORMS


class FakeClock:
    """Monotonic clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher(BaseFetcher):
    """Serve canned HTML by URL; unknown or failing URLs raise like a timeout."""

    def __init__(self, pages=None, failing=(), clock=None):
        self.pages = dict(pages or {})
        self.failing = set(failing)
        self.clock = clock
        self.requests = []
        self.wait_for = []
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    def close(self):
        self.closed = True

    def fetch(self, url, wait_for=None):
        self.requests.append((url, self.clock() if self.clock else None))
        self.wait_for.append(wait_for)
        if url in self.failing or url not in self.pages:
            raise TimeoutError(f"Timeout 45000ms exceeded navigating to {url}")
        return self.pages[url], url


def page(*links, extra=""):
    """Minimal HTML page with the given (text, href) anchors."""
    anchors = "\n".join(f'<li><a href="{href}">{text}</a></li>' for text, href in links)
    return f"<html><body>{extra}<ul>{anchors}</ul></body></html>"


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def settings():
    return CrawlSettings(
        navigation_interval=0,
        jurisdiction_interval=0,
        settle=0,
        platforms={
            name: PlatformSettings(fetcher="http", max_titles=30, max_chapters=50)
            for name in PLATFORMS
        },
        priority=["Example City", "Second City"],
    )
