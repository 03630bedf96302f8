"""
Lesson content CLI.

Commands for validating the lessons tree, building the manifest and
inspecting how individual lessons resolve and load.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from config import Settings, get_settings
from ventylab.content.batch import BatchReport, IssueKind, LessonBatchValidator
from ventylab.content.errors import ContentError, LoadError, SchemaLoadError
from ventylab.content.linter import WarningKind, sorted_levels
from ventylab.content.loader import build_lesson_loader
from ventylab.content.manifest import build_manifest, write_manifest
from ventylab.content.paths import LessonPathResolver, PathTables
from ventylab.core.schema_validator import LessonSchemaValidator, get_validator

lessons_app = typer.Typer(
    help="Lesson validation, manifest and loading commands",
    no_args_is_help=True,
)

console = Console()

ISSUE_STYLES = {
    IssueKind.PARSE: ("red", "x"),
    IssueKind.SCHEMA: ("red", "x"),
    IssueKind.SECTIONS_ORDER: ("yellow", "!"),
    IssueKind.ZERO_PAGES: ("red", "x"),
}


def _load_schema(schema: Path | None, settings: Settings) -> LessonSchemaValidator:
    path = schema or settings.lesson_schema_path
    try:
        return get_validator(str(path) if path else None)
    except SchemaLoadError as e:
        console.print(f"[red]x {e}[/red]")
        raise typer.Exit(1)


def _resolver(settings: Settings) -> LessonPathResolver:
    tables = PathTables.from_file(settings.path_tables_file) if settings.path_tables_file else None
    return LessonPathResolver(tables, lesson_prefix=settings.lesson_path_prefix)


# ========================================
# Report rendering
# ========================================


def _print_page_counts(report: BatchReport) -> None:
    console.print("\n[bold blue]Page Counts by Lesson[/bold blue]")
    for module_id, counts in report.pages_by_module().items():
        console.print(f"  [cyan]{module_id}[/cyan]")
        for count in counts:
            status = "[green]ok[/green]" if count.pages > 0 else "[red]empty[/red]"
            console.print(f"    {status} [yellow]{count.lesson_id}[/yellow]: {count.pages} pages")


def _print_lint(report: BatchReport) -> None:
    result = report.lint_result
    if not result.warnings:
        console.print("\n[green]No semantic linting warnings found[/green]")
        return

    console.print("\n[bold yellow]Semantic linter warnings (non-blocking)[/bold yellow]")

    duplicates = result.of_kind(WarningKind.DUPLICATE_CONTENT)
    if duplicates:
        console.print(f"\n[yellow]Duplicate content ({len(duplicates)} warning(s)):[/yellow]")
        for warning in duplicates:
            console.print(f'  [yellow]Section "{warning.title}"[/yellow]')
            if warning.is_template:
                console.print("    [blue]Some instances are marked metadata.sectionTemplate=true[/blue]")
            console.print(f"    {warning.message}", markup=False)
            console.print(f"    [dim]Lessons: {', '.join(warning.lesson_ids)}[/dim]")

    collisions = result.of_kind(WarningKind.TITLE_COLLISION)
    if collisions:
        console.print(f"\n[yellow]Rename suggestions ({len(collisions)} warning(s)):[/yellow]")
        for warning in collisions:
            console.print(f'  [yellow]Section "{warning.title}"[/yellow]')
            console.print(f"    {warning.message}", markup=False)
            console.print(f"    [dim]Lessons: {', '.join(warning.lesson_ids)}[/dim]")
            console.print(
                "    [blue]Rename sections whose content differs, or mark shared "
                "templates with metadata.sectionTemplate=true[/blue]"
            )

    table = Table(title="Semantic linter summary by level")
    table.add_column("Level", style="cyan")
    table.add_column("Sections", justify="right")
    table.add_column("Templates", justify="right", style="green")
    table.add_column("Collisions", justify="right", style="yellow")
    table.add_column("Rename suggestions", justify="right", style="yellow")
    for level, stats in sorted_levels(result.summary_by_level):
        table.add_row(level, str(stats.total), str(stats.templates), str(stats.collisions), str(stats.suggestions))
    console.print(table)


def _print_issues(report: BatchReport) -> None:
    for kind, issues in report.issues_by_kind().items():
        color, symbol = ISSUE_STYLES[kind]
        console.print(f"\n[{color}]{symbol} {kind.label} ({len(issues)}):[/{color}]")
        for issue in issues:
            console.print(f"   {issue.file}: {issue.message}", style=color, markup=False)


def print_report(report: BatchReport) -> None:
    """Render a batch report the way the validate command shows it."""
    _print_page_counts(report)
    _print_lint(report)

    console.print(f"\n[blue]Total files validated: {len(report.files)}[/blue]")
    _print_issues(report)
    console.print()

    warnings = len(report.lint_result.warnings)
    if report.blocking:
        console.print(f"[red]x Validation failed with {len(report.issues)} issue(s)[/red]")
        if warnings:
            console.print(f"[yellow]! Additionally, {warnings} semantic linting warning(s) found (non-blocking)[/yellow]")
    else:
        console.print("[green]All lessons are valid![/green]")
        if warnings:
            console.print(f"[yellow]! However, {warnings} semantic linting warning(s) found (non-blocking)[/yellow]")


# ========================================
# Commands
# ========================================


@lessons_app.command("validate")
def validate_lessons(
    root: Path = typer.Argument(None, help="Lessons directory (default: configured lessons dir)"),
    schema: Path = typer.Option(None, "--schema", "-s", help="Lesson JSON Schema file"),
):
    """
    Validate lesson files: JSON syntax, schema, section order and page count.

    Exits 1 when any blocking issue is found. Semantic linter warnings are
    reported but never change the exit code.

    Examples:
        ventylab lessons validate
        ventylab lessons validate data/lessons --schema lesson.schema.json
    """
    settings = get_settings()
    root = root or settings.get_lessons_dir()
    if not root.is_dir():
        console.print(f"[red]Error: Lessons directory not found: {root}[/red]")
        raise typer.Exit(1)

    validator = LessonBatchValidator(_load_schema(schema, settings))
    report = validator.run_tree(root, settings.lesson_glob, settings.lesson_exclude)
    if not report.files:
        console.print("[yellow]! No lesson files found[/yellow]")
        raise typer.Exit(0)

    console.print("\n[bold cyan]VentyLab lesson validation[/bold cyan]")
    print_report(report)
    raise typer.Exit(report.exit_code)


@lessons_app.command("manifest")
def lessons_manifest(
    root: Path = typer.Argument(None, help="Lessons directory (default: configured lessons dir)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the manifest to this file"),
):
    """
    Build the lessons manifest (lessons and page totals per level).

    Examples:
        ventylab lessons manifest
        ventylab lessons manifest data/lessons -o data/lessons.manifest.json
    """
    settings = get_settings()
    root = root or settings.get_lessons_dir()
    if not root.is_dir():
        console.print(f"[red]Error: Lessons directory not found: {root}[/red]")
        raise typer.Exit(1)

    manifest = build_manifest(root, module_levels=settings.module_levels)

    if output is None:
        typer.echo(json.dumps(manifest, indent=2, ensure_ascii=False))
        return

    write_manifest(manifest, output)
    table = Table(title=f"Manifest written to {output}")
    table.add_column("Level", style="cyan")
    table.add_column("Lessons", justify="right")
    table.add_column("Pages", justify="right")
    for level in manifest["levels"]:
        table.add_row(level["levelId"], str(level["totalLessons"]), str(level["totalPages"]))
    console.print(table)
    console.print(f"[green]{len(manifest['lessons'])} lessons in manifest[/green]")


@lessons_app.command("resolve")
def resolve_lesson(
    lesson_id: str = typer.Argument(..., help="Lesson id"),
    module_id: str = typer.Argument(..., help="Module id"),
):
    """Print the storage path a lesson resolves to."""
    settings = get_settings()
    try:
        resolver = _resolver(settings)
    except (OSError, ContentError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    typer.echo(resolver.resolve(lesson_id, module_id))


@lessons_app.command("show")
def show_lesson(
    lesson_id: str = typer.Argument(..., help="Lesson id"),
    module_id: str = typer.Argument(..., help="Module id"),
    source: str = typer.Option(None, "--source", help="Content source: bundled, network or auto"),
):
    """
    Load a lesson through the loader and print the normalized document as JSON.

    Examples:
        ventylab lessons show respiratory-anatomy module-01-fundamentals
        ventylab lessons show lesson-02-gas-exchange module-01-fundamentals --source network
    """
    settings = get_settings()
    if source:
        if source not in ("bundled", "network", "auto"):
            console.print(f"[red]Error: Unknown content source: {source}[/red]")
            raise typer.Exit(1)
        settings = settings.model_copy(update={"content_source": source})

    async def load():
        loader = build_lesson_loader(settings)
        try:
            return await loader.load(lesson_id, module_id)
        finally:
            await loader.aclose()

    try:
        document = asyncio.run(load())
    except LoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    typer.echo(json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False))
