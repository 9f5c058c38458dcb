"""Sources management commands."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config, ConfigModel, SourceConfig, load_sources, save_sources
from ..constants import SourceType
from ..errors import AppError
from ..ingestion import GNewsFetcher, RSSFetcher

console = Console()
sources_app = typer.Typer(help="Manage news sources")


def _config(ctx: typer.Context) -> Config:
    return Config((ctx.obj or {}).get("config_path"))


def _load(sources_path: Path) -> List[SourceConfig]:
    try:
        return load_sources(sources_path)
    except FileNotFoundError:
        console.print("[red]Sources file not found. Run 'newshub init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@sources_app.command("list")
def sources_list(ctx: typer.Context) -> None:
    """List all configured sources."""
    sources = _load(_config(ctx).sources_path)

    if not sources:
        console.print("[yellow]No sources configured.[/yellow]")
        return

    table = Table(title="Configured Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Enabled", style="yellow")
    table.add_column("URL / Query", style="blue")

    for source in sources:
        if source.type == SourceType.RSS:
            target = source.url or ""
        else:
            target = f"{source.provider}: {source.query or '(default query)'}"
        table.add_row(
            source.name,
            source.type.value,
            "✓" if source.enabled else "✗",
            target,
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Source name"),
    source_type: SourceType = typer.Option(SourceType.RSS, "--type", "-t", help="Source type (rss, api)"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="RSS feed URL"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="API provider (gnews)"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search query for API sources"),
) -> None:
    """Add a new source."""
    sources_path = _config(ctx).sources_path

    try:
        sources = load_sources(sources_path)
    except FileNotFoundError:
        sources = []

    if any(s.name == name or (url and s.url == url) for s in sources):
        console.print(f"[red]Source '{name}' or URL already exists.[/red]")
        raise typer.Exit(1)

    try:
        new_source = SourceConfig(
            name=name,
            type=source_type,
            url=url,
            provider=provider,
            query=query,
            enabled=True,
        )
    except ValueError as e:
        console.print(f"[red]Invalid source: {e}[/red]")
        raise typer.Exit(1)

    sources.append(new_source)
    save_sources(sources, sources_path)

    console.print(f"[green]✅ Added source: {name}[/green]")


@sources_app.command("remove")
def sources_remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source name to remove"),
) -> None:
    """Remove a source."""
    sources_path = _config(ctx).sources_path
    sources = _load(sources_path)

    remaining = [s for s in sources if s.name != name]
    if len(remaining) == len(sources):
        console.print(f"[red]Source '{name}' not found.[/red]")
        raise typer.Exit(1)

    save_sources(remaining, sources_path)
    console.print(f"[green]✅ Removed source: {name}[/green]")


@sources_app.command("test")
def sources_test(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Source name to test (or test all)"),
) -> None:
    """Fetch each source once and report how many articles it yields."""
    config = _config(ctx)
    sources = _load(config.sources_path)

    if name:
        sources = [s for s in sources if s.name == name]
        if not sources:
            console.print(f"[red]Source '{name}' not found.[/red]")
            raise typer.Exit(1)

    try:
        settings = config.config
    except FileNotFoundError:
        settings = ConfigModel()

    rss_fetcher = RSSFetcher(timeout=settings.rss.timeout_seconds, user_agent=settings.rss.user_agent)
    gnews_fetcher = GNewsFetcher(
        api_key=settings.gnews.resolve_api_key(),
        base_url=settings.gnews.base_url,
        timeout=settings.gnews.timeout_seconds,
    )

    async def check_source(source: SourceConfig) -> int:
        if source.type == SourceType.RSS:
            articles = await rss_fetcher.fetch(source.url, source.name)
        else:
            articles = await gnews_fetcher.fetch(source.fetcher_config())
        return len(articles)

    for source in sources:
        if not source.enabled:
            console.print(f"[yellow]⚠️  {source.name}: Disabled[/yellow]")
            continue

        try:
            count = asyncio.run(check_source(source))
            console.print(f"[green]✅ {source.name}: OK ({count} articles)[/green]")
        except AppError as e:
            console.print(f"[red]❌ {source.name}: Failed - {e.message}[/red]")
        except Exception as e:
            console.print(f"[red]❌ {source.name}: Error - {e}[/red]")
