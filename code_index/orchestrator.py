"""Crawl orchestration: selection, per-jurisdiction dispatch, and failure isolation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from code_index.adapters import ADAPTERS, BaseAdapter, Jurisdiction, JurisdictionResult
from code_index.navigation.fetchers import BaseFetcher
from code_index.navigation.navigator import Navigator
from code_index.registry import RegistryError
from code_index.settings import CrawlSettings
from code_index.utils.rate_limiter import IntervalLimiter

logger = logging.getLogger(__name__)


@dataclass
class CrawlOutcome:
    """What happened to one jurisdiction during a run."""

    result: JurisdictionResult
    error: Optional[str] = None
    elapsed: float = 0.0
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def select_jurisdictions(
    registry: list[Jurisdiction],
    settings: CrawlSettings,
    city: str | None = None,
    everything: bool = False,
) -> list[Jurisdiction]:
    """Pick the jurisdictions for this run.

    One named city (exact match) wins over everything, which wins over the
    configured priority list. Registry order is preserved.
    """
    if city is not None:
        chosen = [j for j in registry if j.name == city]
        if not chosen:
            raise RegistryError(f"City '{city}' not found in registry")
        return chosen[:1]
    if everything:
        return list(registry)

    priority = set(settings.priority)
    chosen = [j for j in registry if j.name in priority]
    missing = priority - {j.name for j in chosen}
    if missing:
        logger.debug("Priority cities not in registry: %s", ", ".join(sorted(missing)))
    return chosen


def required_fetchers(jurisdictions: Iterable[Jurisdiction], settings: CrawlSettings) -> set[str]:
    """Fetcher kinds ('browser', 'http') the selected jurisdictions will use."""
    return {
        settings.for_platform(j.platform).fetcher
        for j in jurisdictions
        if j.platform in ADAPTERS
    }


class CrawlOrchestrator:
    """Crawl selected jurisdictions one at a time.

    Every attempted jurisdiction yields a CrawlOutcome whose result is always
    present; failures leave its titles empty. Cancellation (cancel() or
    Ctrl-C) stops further dispatch and keeps the titles already collected
    for the jurisdiction in progress.

    Args:
        settings: Crawl settings.
        fetchers: Page fetchers keyed by kind ('browser', 'http').
        adapters: Platform -> adapter class registry.
        clock: Monotonic clock for the spacing limiters.
        sleep: Sleep function for the spacing limiters.
    """

    def __init__(
        self,
        settings: CrawlSettings,
        fetchers: dict[str, BaseFetcher],
        adapters: dict[str, type[BaseAdapter]] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.fetchers = fetchers
        self.adapters = adapters if adapters is not None else ADAPTERS
        self._clock = clock
        self._sleep = sleep
        self.jurisdiction_limiter = IntervalLimiter(settings.jurisdiction_interval, clock, sleep)
        self._cancel = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        """Stop dispatching new jurisdictions."""
        self._cancel.set()

    def navigator_for(self, jurisdiction: Jurisdiction) -> Navigator:
        """A fresh navigator with its own politeness limiter."""
        kind = self.settings.for_platform(jurisdiction.platform).fetcher
        fetcher = self.fetchers.get(kind)
        if fetcher is None:
            raise RuntimeError(f"No '{kind}' fetcher available")
        limiter = IntervalLimiter(self.settings.navigation_interval, self._clock, self._sleep)
        return Navigator(fetcher, limiter=limiter, label=jurisdiction.name)

    def _empty_result(self, jurisdiction: Jurisdiction) -> JurisdictionResult:
        return JurisdictionResult(
            city=jurisdiction.name,
            county=jurisdiction.county,
            platform=jurisdiction.platform or jurisdiction.source_platform,
            base_url=jurisdiction.base_url,
        )

    def crawl_one(self, jurisdiction: Jurisdiction) -> CrawlOutcome:
        """Crawl one jurisdiction; never raises except on interpreter exit."""
        start = self._clock()
        adapter_cls = self.adapters.get(jurisdiction.platform)
        if adapter_cls is None:
            platform = jurisdiction.platform or jurisdiction.source_platform or "unknown"
            logger.warning("%s: no adapter for platform %s", jurisdiction.name, platform)
            return CrawlOutcome(
                result=self._empty_result(jurisdiction),
                error=f"no adapter for platform {platform}",
            )

        adapter = None
        try:
            navigator = self.navigator_for(jurisdiction)
            adapter = adapter_cls(navigator, self.settings.for_platform(jurisdiction.platform))
            result = adapter.crawl(jurisdiction)
            return CrawlOutcome(result=result, elapsed=self._clock() - start)
        except KeyboardInterrupt:
            self.cancel()
            result = (
                adapter.partial_result(jurisdiction)
                if adapter is not None
                else self._empty_result(jurisdiction)
            )
            logger.warning(
                "Cancelled during %s; keeping %d collected titles",
                jurisdiction.name,
                len(result.titles),
            )
            return CrawlOutcome(
                result=result,
                error="cancelled",
                elapsed=self._clock() - start,
                cancelled=True,
            )
        except Exception as e:
            logger.exception("Failed to crawl %s", jurisdiction.name)
            return CrawlOutcome(
                result=self._empty_result(jurisdiction),
                error=str(e) or e.__class__.__name__,
                elapsed=self._clock() - start,
            )

    def run(
        self,
        jurisdictions: Iterable[Jurisdiction],
        on_outcome: Callable[[CrawlOutcome], None] | None = None,
    ) -> list[CrawlOutcome]:
        """Crawl jurisdictions in order, spacing their starts."""
        outcomes = []
        for jurisdiction in jurisdictions:
            if self.cancelled:
                logger.info("Cancelled; not dispatching %s", jurisdiction.name)
                break
            try:
                self.jurisdiction_limiter.wait()
            except KeyboardInterrupt:
                self.cancel()
                break
            logger.info("Processing %s...", jurisdiction.name)
            outcome = self.crawl_one(jurisdiction)
            outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)
        return outcomes
