"""Main CLI application."""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Load .env file if it exists
load_dotenv()

from ..db import close_connection_pool
from .init import init_command
from .jobs import digest_command, fetch_command, retry_audio_command, summarise_command
from .run import run_command
from .sources import sources_app

console = Console()

app = typer.Typer(
    name="newshub",
    help="AI News Hub - news ingestion, summarisation and daily digests",
    no_args_is_help=True,
)


def setup_logging(level: int = logging.INFO) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    if level > logging.DEBUG:
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.yaml (default: ~/.config/newshub/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    ctx.obj = {"config_path": config_path}
    ctx.call_on_close(close_connection_pool)


# Register commands
app.command("init")(init_command)
app.command("fetch")(fetch_command)
app.command("summarise")(summarise_command)
app.command("digest")(digest_command)
app.command("retry-audio")(retry_audio_command)
app.command("run")(run_command)
app.add_typer(sources_app, name="sources", help="Manage news sources")


if __name__ == "__main__":
    app()
