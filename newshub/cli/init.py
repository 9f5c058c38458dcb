"""Init command implementation."""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, SourceConfig, save_config, save_sources
from ..config.loader import DEFAULT_CONFIG_DIR
from ..constants import SourceType
from ..db import init_database, validate_connection

console = Console()


def create_default_sources() -> List[SourceConfig]:
    """Create default AI news sources."""
    feeds = [
        ("OpenAI Blog", "https://openai.com/blog/rss.xml"),
        ("Google AI Blog", "https://blog.google/technology/ai/rss/"),
        ("Hugging Face Blog", "https://huggingface.co/blog/feed.xml"),
        ("MIT News - AI", "https://news.mit.edu/rss/topic/artificial-intelligence2"),
        ("The Verge - AI", "https://www.theverge.com/rss/ai-artificial-intelligence/index.xml"),
        ("TechCrunch - AI", "https://techcrunch.com/category/artificial-intelligence/feed/"),
    ]
    sources = [SourceConfig(name=name, type=SourceType.RSS, url=url) for name, url in feeds]
    sources.append(
        SourceConfig(
            name="GNews - LLM",
            type=SourceType.API,
            provider="gnews",
            query="large language model OR LLM OR AI agents",
            lang="en",
            max=10,
        )
    )
    return sources


def init_command(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("newshub", "--db-name", help="Database name"),
    db_user: str = typer.Option("newshub", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed default AI news sources",
    ),
) -> None:
    """Initialize AI News Hub configuration and database."""
    console.print(Panel.fit("AI News Hub - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "NEWSHUB_DB_PASSWORD",
        },
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    if seed_sources:
        sources = create_default_sources()
        save_sources(sources, sources_path)
        console.print(f"✅ Created sources: {sources_path} (seeded with {len(sources)} sources)")
    else:
        save_sources([], sources_path)
        console.print(f"✅ Created sources: {sources_path} (empty)")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export NEWSHUB_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)
    console.print("✅ Database schema initialized")

    console.print(
        Panel(
            f"[green]✅ AI News Hub initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sources: {sources_path}\n\n"
            f"Next steps:\n"
            f"1. Set provider keys: [bold]GEMINI_API_KEY, GROQ_API_KEY, OPENAI_API_KEY, GNEWS_API_KEY[/bold]\n"
            f"2. Set storage credentials: [bold]SUPABASE_URL, SUPABASE_SECRET_KEY[/bold]\n"
            f"3. Run: [bold]newshub run[/bold]",
            style="green",
        )
    )
