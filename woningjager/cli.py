"""Command-line interface for the listing crawler."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from woningjager.adapters import load_adapters
from woningjager.config import settings
from woningjager.errors import AdapterConfigError
from woningjager.log import setup_logging
from woningjager.pipeline import Crawler, RunSummary
from woningjager.scheduler import run_pass, serve
from woningjager.storage import ListingStore

app = typer.Typer(
    name="woningjager",
    help="Crawl Dutch real estate platforms and alert on interesting listings",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Configure logging for every command."""
    setup_logging("DEBUG" if verbose else settings.log_level)


def _build_crawler(platform: Optional[str]) -> Crawler:
    try:
        return Crawler.from_settings(platform)
    except AdapterConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _print_summaries(summaries: list[RunSummary]) -> None:
    table = Table(title="Crawl summary")
    table.add_column("Platform", style="cyan")
    table.add_column("Fetched", justify="right")
    table.add_column("New", style="green", justify="right")
    table.add_column("Alerted", style="magenta", justify="right")
    table.add_column("Status")

    for s in summaries:
        status = f"[red]{s.error}[/red]" if s.failed else "[green]ok[/green]"
        table.add_row(s.platform, str(s.fetched), str(s.new), str(s.alerted), status)

    console.print(table)


@app.command()
def run(
    platform: Optional[str] = typer.Option(
        None,
        "--platform", "-p",
        help="Only crawl this platform",
    ),
    interval: int = typer.Option(
        settings.interval_minutes,
        "--interval", "-i",
        help="Minutes between crawl passes",
    ),
):
    """Crawl now and then every interval, forever."""
    crawler = _build_crawler(platform)
    try:
        asyncio.run(serve(crawler, interval))
    except KeyboardInterrupt:
        console.print("[yellow]Stopped[/yellow]")


@app.command()
def once(
    platform: Optional[str] = typer.Option(
        None,
        "--platform", "-p",
        help="Only crawl this platform",
    ),
):
    """Run a single crawl pass."""
    crawler = _build_crawler(platform)

    async def run_once():
        try:
            await crawler.store.init_schema()
            return await run_pass(crawler)
        finally:
            await crawler.close()

    _print_summaries(asyncio.run(run_once()))


@app.command()
def stats():
    """Show database statistics."""

    async def counts():
        store = ListingStore(settings.get_database_url())
        try:
            await store.init_schema()
            return await store.platforms()
        finally:
            await store.close()

    table = Table(title="Database Statistics")
    table.add_column("Platform", style="cyan")
    table.add_column("Count", style="green", justify="right")

    total = 0
    for platform, count in sorted(asyncio.run(counts()).items()):
        table.add_row(platform, str(count))
        total += count

    table.add_row("─" * 15, "─" * 8)
    table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")

    console.print(table)


@app.command()
def export(
    filepath: str = typer.Argument(
        "listings.csv",
        help="Output CSV file path",
    ),
    platform: Optional[str] = typer.Option(
        None,
        "--platform", "-p",
        help="Filter by platform",
    ),
):
    """Export listings to CSV file."""
    console.print(f"[bold]Exporting to {filepath}...[/bold]")

    async def run_export():
        store = ListingStore(settings.get_database_url())
        try:
            await store.init_schema()
            return await store.export_csv(filepath, platform)
        finally:
            await store.close()

    count = asyncio.run(run_export())

    if count > 0:
        console.print(f"[green]✓ Exported {count} listings to {filepath}[/green]")
    else:
        console.print("[yellow]No listings to export[/yellow]")


@app.command()
def init():
    """Initialize the database."""

    async def run_init():
        store = ListingStore(settings.get_database_url())
        try:
            await store.init_schema()
        finally:
            await store.close()

    asyncio.run(run_init())
    console.print("[green]✓ Database initialized[/green]")


@app.command()
def adapters():
    """List registered adapters."""
    try:
        registered = load_adapters()
    except AdapterConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Adapters")
    table.add_column("Platform", style="cyan")
    table.add_column("Fetch")
    table.add_column("Parser")
    table.add_column("Hooks")
    table.add_column("Target URL", overflow="fold")

    for adapter in registered:
        hooks = [
            name for name in ("enrich", "get_ai_properties")
            if getattr(adapter, name) is not None
        ]
        table.add_row(
            adapter.platform,
            "browser" if adapter.browser else "session",
            "json" if adapter.parse_json is not None else "html",
            ", ".join(hooks) or "-",
            adapter.target_url,
        )

    console.print(table)


@app.command()
def test_adapter(
    platform: str = typer.Argument(
        ...,
        help="Platform to test",
    ),
):
    """Fetch and parse one adapter's index without storing anything."""
    console.print(f"[bold]Testing {platform} adapter...[/bold]")
    crawler = _build_crawler(platform)
    adapter = crawler.adapters[0]

    async def run_test():
        try:
            fetcher = crawler.fetcher_for(adapter)
            response = await crawler.fetch_index(adapter, fetcher)
            return crawler.parse(adapter, response)
        finally:
            await crawler.close()

    try:
        listings = asyncio.run(run_test())
    except Exception as e:
        console.print(f"\n[red]✗ Test failed: {e}[/red]")
        raise typer.Exit(1)

    for listing in listings[:3]:
        console.print(f"[green]✓[/green] {listing.street} ({listing.zipcode or '?'})")
        console.print(f"  Price: {listing.price}  Size: {listing.meters}")
        console.print(f"  URL: {listing.url}")

    console.print(f"\n[green]✓ Test successful! Found {len(listings)} listings[/green]")


if __name__ == "__main__":
    app()
