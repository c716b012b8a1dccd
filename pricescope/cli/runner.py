# pricescope/cli/runner.py

"""Headless CLI runner that reuses the async pipeline and search services."""

import json
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from pricescope.config.settings import Settings
from pricescope.filters.price_ranker import annotate_price_extremes
from pricescope.models.product import ComparisonResult, NormalizedProduct
from pricescope.scrapers.fetch_orchestrator import FetchOrchestrator
from pricescope.services.comparison_search import ComparisonSearch
from pricescope.services.currency_normalizer import CurrencyNormalizer
from pricescope.services.extraction_pipeline import ExtractionPipeline

logger = logging.getLogger("pricescope.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _print_product(product: NormalizedProduct) -> None:
    """Render the scraped source product as a Rich table."""
    table = Table(
        title=f"Source product ({product.website_name})",
        show_header=False,
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Field", style="bold", width=12)
    table.add_column("Value", overflow="fold")

    price = product.price_text or "Price not found"
    if product.original_price and product.original_price != product.price_text:
        price = f"{price} ({product.original_price})"
    table.add_row("Name", product.name)
    table.add_row("Price", price)
    for point in product.description:
        table.add_row("•", point)
    table.add_row("URL", product.url)
    Console().print(table)


def _print_comparison(result: ComparisonResult) -> None:
    """Render comparison entries with best/highest price markers."""
    title = "Comparison"
    if result.fallback:
        title += " (retailer links, prices unavailable)"
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=50)
    table.add_column("Price", justify="right")
    table.add_column("Site", style="magenta")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, entry in enumerate(result.products, 1):
        if entry.is_lowest:
            price = f"[bold green]{entry.price_text} 🟢[/bold green]"
        elif entry.is_highest:
            price = f"[red]{entry.price_text} 🔴[/red]"
        else:
            price = entry.price_text
        table.add_row(
            str(idx),
            entry.name[:50],
            price,
            entry.website_name,
            entry.url,
        )

    Console().print(table)


def _emit_json(payload: dict[str, Any]) -> None:
    """Write a JSON document to stdout."""
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def cli_compare(
    product_name: str,
    output_format: str,
    search: ComparisonSearch | None = None,
) -> int:
    """Search comparable listings only; returns an exit code."""
    searcher = search or ComparisonSearch()
    _err.print(f"[bold]Comparing:[/bold] {product_name}")
    result = await searcher.search(product_name)
    annotate_price_extremes(result.products)

    if output_format == "table":
        _print_comparison(result)
    else:
        _emit_json(result.to_dict())
    return 0 if result.products else 1


async def cli_scrape(
    url: str,
    output_format: str,
    pipeline: ExtractionPipeline | None = None,
    search: ComparisonSearch | None = None,
) -> int:
    """Scrape *url*, then compare it; returns an exit code (0=ok, 1=fail)."""
    if pipeline is None or search is None:
        normalizer = CurrencyNormalizer()
        pipeline = pipeline or ExtractionPipeline(
            fetcher=FetchOrchestrator(
                render_enabled=not Settings.is_hosted_environment()
            ),
            normalizer=normalizer,
        )
        search = search or ComparisonSearch(normalizer=normalizer)

    _err.print(f"[bold]Scraping:[/bold] {url}")
    try:
        product = await pipeline.run(url)
    except Exception as exc:
        logger.error("Scrape failed for %s: %s", url, exc, exc_info=True)
        recovered = pipeline.recover(url)
        if recovered is None:
            _err.print(f"[red]Failed to extract product data: {exc}[/red]")
            return 1
        product = recovered

    if product.blocked:
        _err.print(f"[yellow]{product.blocker_message}[/yellow]")

    query = product.search_query or product.name
    comparison = await search.search(query)
    annotate_price_extremes(comparison.products)

    if output_format == "table":
        _print_product(product)
        _print_comparison(comparison)
    else:
        _emit_json(
            {
                "product": product.to_dict(),
                "comparison": comparison.to_dict(),
            }
        )
    return 0


async def run_health_check() -> int:
    """Run connectivity health check on all external collaborators."""
    from pricescope.services.health_checker import HealthChecker

    _err.print("[bold]Running connectivity health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Service Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Target", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        elif r.status == "skipped":
            status = "[dim]— SKIPPED[/dim]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(
            r.target_id, status, latency, r.message,
        )

    Console().print(table)
    return 1 if any_down else 0
