"""Command line interface."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..config import Config

console = Console()


def get_config(ctx: typer.Context) -> Config:
    """Config manager for the --config path, exiting if the file is missing or invalid."""
    config_path: Optional[Path] = (ctx.obj or {}).get("config_path")
    config = Config(config_path)
    try:
        config.config
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config.config_path}. Run 'newshub init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config
