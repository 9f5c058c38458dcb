"""Run command implementation."""

import typer
from rich.console import Console

from ..db import validate_connection
from ..pipeline import PipelineOrchestrator
from . import get_config

console = Console()


def run_command(ctx: typer.Context) -> None:
    """Run fetch, summarise and digest in one go."""
    config = get_config(ctx)

    console.print("[dim]Checking database connection...[/dim]")
    if not validate_connection(config.get_db_config()):
        console.print("[red]❌ Database connection failed![/red]")
        console.print("Please check your database configuration and ensure Postgres is running.")
        raise typer.Exit(1)

    try:
        success = PipelineOrchestrator(config).run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Pipeline interrupted by user[/yellow]")
        raise typer.Exit(1)

    if not success:
        raise typer.Exit(1)
