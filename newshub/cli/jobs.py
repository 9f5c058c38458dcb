"""Pipeline entry point commands: fetch, summarise, digest, retry-audio."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..constants import SummaryStatus
from ..errors import AppError, is_digest_exists
from ..generation import UsageStats
from ..pipeline import PipelineOrchestrator
from . import get_config

console = Console()

_STATUS_STYLES = {
    SummaryStatus.COMPLETED: "green",
    SummaryStatus.SKIPPED: "yellow",
    SummaryStatus.FAILED_SAFETY: "red",
    SummaryStatus.FAILED_QUOTA: "red",
}


def print_usage(stats: UsageStats) -> None:
    mode = "[yellow]fallback[/yellow]" if stats.using_fallback else "[green]primary[/green]"
    console.print(
        f"Primary LLM usage {stats.date}: {stats.call_count}/{stats.limit} ({stats.percent_used}%), routing to {mode}"
    )


def fetch_command(ctx: typer.Context) -> None:
    """Fetch all active sources and store new articles."""
    orchestrator = PipelineOrchestrator(get_config(ctx))

    try:
        results = asyncio.run(orchestrator.fetch())
    except Exception as e:
        console.print(f"[red]Fetch failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Fetch Results")
    table.add_column("Source", style="cyan")
    table.add_column("Fetched", justify="right")
    table.add_column("Inserted", justify="right", style="green")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Error", style="dim")

    for result in results:
        table.add_row(
            result.source,
            str(result.fetched),
            str(result.inserted),
            str(result.skipped),
            str(result.failed),
            result.error or "",
        )

    console.print(table)
    console.print(
        f"Fetch complete: {sum(r.inserted for r in results)} inserted, {sum(r.skipped for r in results)} skipped"
    )


def summarise_command(
    ctx: typer.Context,
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        "-b",
        min=1,
        max=100,
        help="Maximum articles to summarise (default from config)",
    ),
) -> None:
    """Classify and summarise pending articles."""
    orchestrator = PipelineOrchestrator(get_config(ctx))

    try:
        batch = asyncio.run(orchestrator.summarise(batch_size))
    except Exception as e:
        console.print(f"[red]Summarisation failed: {e}[/red]")
        raise typer.Exit(1)

    if batch.processed == 0:
        console.print("[yellow]No pending articles.[/yellow]")
        return

    table = Table(title="Summarisation Results")
    table.add_column("Article", justify="right", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Category", style="magenta")
    table.add_column("Score", justify="right")
    table.add_column("Note", style="dim")

    for result in batch.results:
        style = _STATUS_STYLES.get(result.status, "white")
        table.add_row(
            str(result.id),
            f"[{style}]{result.status.value}[/{style}]",
            result.category.value if result.category else "-",
            str(result.metadata.relevance_score) if result.metadata else "-",
            result.error or "",
        )

    console.print(table)
    console.print(f"Processed {batch.processed}: {batch.completed} completed, {batch.failed} not completed")
    print_usage(orchestrator.usage_tracker.get_stats())


def digest_command(ctx: typer.Context) -> None:
    """Compose today's digest. An existing digest for today is not an error."""
    orchestrator = PipelineOrchestrator(get_config(ctx))

    try:
        result = asyncio.run(orchestrator.digest())
    except AppError as e:
        if is_digest_exists(e):
            console.print(f"[yellow]{e.message}; nothing to do.[/yellow]")
            return
        console.print(f"[red]Digest failed [{e.code.value}]: {e.message}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Digest failed: {e}[/red]")
        raise typer.Exit(1)

    if result.skipped:
        console.print("[yellow]Skipped: not enough on-topic articles for a digest today.[/yellow]")
        return

    console.print(Markdown(result.summary_text or ""))
    audio = result.audio_url or "[red]failed (use 'newshub retry-audio')[/red]"
    console.print(Panel(
        f"Digest {result.digest_id} from {result.article_count} articles\nAudio: {audio}",
        style="green",
    ))


def retry_audio_command(
    ctx: typer.Context,
    digest_id: int = typer.Argument(..., help="Digest ID"),
) -> None:
    """Regenerate audio for a digest whose audio is pending or failed."""
    orchestrator = PipelineOrchestrator(get_config(ctx))

    try:
        url = asyncio.run(orchestrator.retry_audio(digest_id))
    except AppError as e:
        console.print(f"[red]Audio retry failed [{e.code.value}]: {e.message}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Audio retry failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Audio available at {url}[/green]")

