"""
Typer CLI for the VentyLab lesson toolkit.

Commands:
    ventylab lessons validate   - Validate every lesson file and lint section titles
    ventylab lessons manifest   - Build the lessons manifest
    ventylab lessons resolve    - Show the storage path of a lesson
    ventylab lessons show       - Load a lesson and print the normalized JSON
    ventylab config             - Show current configuration
    ventylab version            - Show version information

Usage:
    ventylab --help
    ventylab lessons validate data/lessons
    ventylab lessons show lesson-02-gas-exchange module-01-fundamentals --source bundled
"""

from __future__ import annotations

import sys

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from ventylab import __version__
from ventylab.cli.lessons import lessons_app

app = typer.Typer(
    help="VentyLab lesson toolkit: validate, normalize and load lesson content",
    no_args_is_help=True,
)

app.add_typer(lessons_app, name="lessons")

console = Console()

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def configure_logging(level: str, log_file: str | None = None) -> None:
    """Replace loguru's default sink with the configured ones."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="10 MB", retention=5)


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Override VENTYLAB_LOG_LEVEL"),
):
    """
    VentyLab lesson content CLI.

    Settings come from VENTYLAB_* environment variables or a .env file.
    """
    settings = get_settings()
    configure_logging((log_level or settings.log_level).upper(), settings.log_file)


@app.command("config")
def show_config() -> None:
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="VentyLab Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Content root", str(settings.content_root))
    table.add_row("Lessons dir", str(settings.get_lessons_dir()))
    table.add_row("Lesson schema", str(settings.lesson_schema_path or "(bundled)"))
    table.add_row("Content source", settings.content_source)
    table.add_row("Content base URL", settings.content_base_url)
    table.add_row("Pages API", settings.pages_api_url or "Not set")
    table.add_row("Cache size", str(settings.cache_max_size))
    table.add_row("Retry", f"{settings.retry_max_attempts} attempts, {settings.retry_base_delay_seconds}s step")
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]ventylab[/bold] v{__version__}")
    rprint("  Lesson content validation and loading")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
