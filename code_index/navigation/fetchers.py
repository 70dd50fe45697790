"""Page fetchers: headless browser for JavaScript-rendered platforms, httpx for static ones."""

from __future__ import annotations

import abc
import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class NavigatorUnavailable(RuntimeError):
    """Raised when the page-loading capability cannot be started."""


class BaseFetcher(abc.ABC):
    """Load a URL and return its rendered HTML."""

    @abc.abstractmethod
    def fetch(self, url: str, wait_for: str | None = None) -> tuple[str, str]:
        """Return (html, final_url). Raises on timeout or error."""

    def start(self) -> None:
        """Acquire resources eagerly; fetchers that need none do nothing."""

    def close(self) -> None:
        """Release resources."""

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.close()


class HttpFetcher(BaseFetcher):
    """Plain HTTP fetcher for server-rendered pages.

    Args:
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header value.
    """

    def __init__(self, timeout: float = 45, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: httpx.Client | None = None

    def start(self) -> None:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    def fetch(self, url: str, wait_for: str | None = None) -> tuple[str, str]:
        self.start()
        logger.debug("GET %s", url)
        response = self._client.get(url)
        response.raise_for_status()
        return response.text, str(response.url)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class BrowserFetcher(BaseFetcher):
    """Headless Chromium fetcher driven through Playwright's sync API.

    One browser page is reused for every navigation; the crawl is sequential.

    Args:
        timeout: Navigation timeout in seconds.
        settle: Pause after network idle, in seconds, for late client rendering.
        wait_for_timeout: Seconds to wait for an optional readiness selector.
        user_agent: Browser user agent.
        headless: Run without a visible window.
    """

    def __init__(
        self,
        timeout: float = 45,
        settle: float = 1.5,
        wait_for_timeout: float = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        headless: bool = True,
    ):
        self.timeout = timeout
        self.settle = settle
        self.wait_for_timeout = wait_for_timeout
        self.user_agent = user_agent
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._page = None
        self._timeout_error: type[Exception] = Exception

    def start(self) -> None:
        if self._page is not None:
            return
        try:
            from playwright.sync_api import TimeoutError as PlaywrightTimeout
            from playwright.sync_api import sync_playwright
        except ImportError as e:
            raise NavigatorUnavailable(
                "Playwright is not installed. Run: pip install playwright "
                "&& playwright install chromium"
            ) from e

        self._timeout_error = PlaywrightTimeout
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            context = self._browser.new_context(user_agent=self.user_agent)
            self._page = context.new_page()
        except Exception as e:
            self.close()
            raise NavigatorUnavailable(f"Could not launch browser: {e}") from e
        logger.info("Browser started")

    def fetch(self, url: str, wait_for: str | None = None) -> tuple[str, str]:
        self.start()
        page = self._page
        page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)
        if wait_for:
            try:
                page.wait_for_selector(wait_for, timeout=self.wait_for_timeout * 1000)
            except self._timeout_error:
                logger.debug("Selector %r not ready on %s, continuing", wait_for, url)
        if self.settle > 0:
            page.wait_for_timeout(self.settle * 1000)
        return page.content(), page.url

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._page = None
