"""CLI entry point for the municipal code crawler."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from pathlib import Path

import click

from code_index.navigation.fetchers import (
    DEFAULT_USER_AGENT,
    BaseFetcher,
    BrowserFetcher,
    HttpFetcher,
    NavigatorUnavailable,
)
from code_index.normalization.normalizer import load_cache, merge_results, write_cache
from code_index.orchestrator import (
    CrawlOrchestrator,
    CrawlOutcome,
    required_fetchers,
    select_jurisdictions,
)
from code_index.registry import RegistryError, load_registry
from code_index.settings import CrawlSettings, SettingsError, load_settings

logger = logging.getLogger(__name__)


def build_fetchers(kinds: set[str], settings: CrawlSettings) -> dict[str, BaseFetcher]:
    """Instantiate the fetchers the selected platforms need."""
    user_agent = settings.user_agent or DEFAULT_USER_AGENT
    fetchers: dict[str, BaseFetcher] = {}
    if "browser" in kinds:
        fetchers["browser"] = BrowserFetcher(
            timeout=settings.timeout,
            settle=settings.settle,
            user_agent=user_agent,
        )
    if "http" in kinds:
        fetchers["http"] = HttpFetcher(timeout=settings.timeout, user_agent=user_agent)
    return fetchers


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_outcome(outcome: CrawlOutcome) -> None:
    result = outcome.result
    if outcome.cancelled:
        click.echo(f"  CANCELLED: {result.city}: kept {len(result.titles)} titles", err=True)
    elif outcome.error:
        click.echo(f"  FAIL: {result.city}: {outcome.error}", err=True)
    elif result.titles:
        click.echo(
            f"  OK: {result.city}: {len(result.titles)} titles, "
            f"{result.chapter_count} chapters ({outcome.elapsed:.0f}s)"
        )
    else:
        click.echo(f"  EMPTY: {result.city}: no content found")


@click.command()
@click.option("--city", default=None, help="Crawl only this jurisdiction (exact registry name)")
@click.option("--all", "crawl_all", is_flag=True, help="Crawl every jurisdiction, not just priority cities")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--registry", type=click.Path(), default=None, help="Jurisdiction registry JSON")
@click.option("--output", "-o", type=click.Path(), default=None, help="Cache document to update")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Crawl settings YAML")
def cli(
    city: str | None,
    crawl_all: bool,
    verbose: bool,
    registry: str | None,
    output: str | None,
    config_path: str | None,
):
    """Crawl municipal code tables of contents into the categorized cache."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = load_settings(Path(config_path) if config_path else None)
        jurisdictions = load_registry(Path(registry or settings.registry_path), settings)
        selected = select_jurisdictions(jurisdictions, settings, city=city, everything=crawl_all)
    except (SettingsError, RegistryError) as e:
        _fail(str(e))
        return

    output_path = Path(output or settings.output_path)
    if city is None and not crawl_all:
        click.echo(f"Processing {len(selected)} priority cities...")
    else:
        click.echo(f"Processing {len(selected)} jurisdiction(s)...")

    previous = load_cache(output_path)
    fetchers = build_fetchers(required_fetchers(selected, settings), settings)
    orchestrator = CrawlOrchestrator(settings, fetchers)

    with ExitStack() as stack:
        try:
            for fetcher in fetchers.values():
                stack.enter_context(fetcher)
        except NavigatorUnavailable as e:
            _fail(str(e))
            return
        outcomes = orchestrator.run(selected, on_outcome=_echo_outcome)

    cache = merge_results(previous, [o.result for o in outcomes])
    size = write_cache(cache, output_path)

    failures = [o for o in outcomes if o.error]
    with_content = sum(1 for o in outcomes if o.result.titles)
    stats = cache["stats"]

    click.echo(f"\n{'=' * 60}")
    if orchestrator.cancelled:
        click.echo("Run cancelled; collected results were saved")
    click.echo(f"Cities processed: {len(outcomes)}")
    click.echo(f"Cities with content: {with_content}")
    click.echo(
        f"Cache: {stats['totalCities']} cities, {stats['totalTitles']} titles, "
        f"{stats['totalChapters']} chapters ({round(size / 1024)} KB)"
    )
    click.echo(f"Output: {output_path}")
    if failures:
        click.echo(f"Done: {len(outcomes) - len(failures)} succeeded, {len(failures)} failed")
        for outcome in failures:
            click.echo(f"  FAIL: {outcome.result.city}: {outcome.error}", err=True)


if __name__ == "__main__":
    cli()
