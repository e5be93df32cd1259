"""
Standards DB CLI.

Command-line interface for querying and checking the standards corpus.

Usage:
    standards-db tables
    standards-db find motors -w number_of_poles=4.0 -w type=Enclosed --capacity 2.5
    standards-db validate [--strict]
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import Settings, settings
from .core.models import Corpus, CorpusLoadError, TableNotFound
from .core.records import thaw
from .ingest.corpus_loader import load_corpus, load_standards
from .search.engine import StandardsLookup
from .utils.logging_config import setup_logging
from .validation.integrity import validate as validate_corpus

app = typer.Typer(
    name="standards-db",
    help="Standards DB - Lookup and integrity checks for building standards tables",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


@dataclass
class CLIState:
    """Options shared by all commands; the corpus is loaded on first use."""
    config: Settings
    files: List[Path] = field(default_factory=list)
    _corpus: Optional[Corpus] = None

    def corpus(self) -> Corpus:
        if self._corpus is None:
            try:
                if self.files:
                    self._corpus = load_corpus(self.files, key_mode=self.config.key_mode)
                else:
                    self._corpus = load_standards(self.config)
            except CorpusLoadError as e:
                err_console.print(f"[red]✗[/red] Failed to load standards: {e}")
                raise typer.Exit(code=2)
        return self._corpus


def parse_criterion(text: str) -> tuple[str, Any]:
    """
    Parse "key=value". Values are read as JSON when possible
    (4.0, true, null, ["a", "b"]), otherwise kept as strings
    ("Enclosed", "90.1-2013").
    """
    if "=" not in text:
        raise typer.BadParameter(f"Expected key=value, got '{text}'")
    key, raw = text.split("=", 1)
    key = key.strip()
    if not key:
        raise typer.BadParameter(f"Empty key in '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key, value


@app.callback()
def main_options(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", "-d", help="Directory holding the standards table files"
    ),
    files: Optional[List[Path]] = typer.Option(
        None, "--file", "-f", help="Explicit table file (repeatable; merged in the given order)"
    ),
    key_mode: Optional[str] = typer.Option(
        None, "--key-mode", help="Key representation: string or interned"
    ),
    use_index: Optional[bool] = typer.Option(
        None, "--index/--no-index", help="Index repeated lookups"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
):
    """Options shared by all commands."""
    updates: Dict[str, Any] = {}
    if data_dir is not None:
        updates["data_dir"] = data_dir
    if key_mode is not None:
        if key_mode not in ("string", "interned"):
            raise typer.BadParameter("key mode must be 'string' or 'interned'", param_hint="--key-mode")
        updates["key_mode"] = key_mode
    if use_index is not None:
        updates["use_index"] = use_index
    if log_level is not None:
        updates["log_level"] = log_level.upper()

    config = settings.model_copy(update=updates)
    setup_logging(
        level=config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.log_dir,
    )
    ctx.obj = CLIState(config=config, files=list(files or []))


@app.command()
def tables(ctx: typer.Context):
    """
    List loaded tables and their row counts.
    """
    corpus = ctx.obj.corpus()

    table = Table(title="Standards Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Form", style="dim")

    for name in sorted(corpus):
        store = corpus[name]
        table.add_row(name, str(len(store)), "wrapped" if store.wrapped else "array")

    console.print(table)
    console.print(f"[green]{len(corpus)} tables, {corpus.record_count} records[/green]")


@app.command()
def find(
    ctx: typer.Context,
    table_name: str = typer.Argument(..., help="Table to search, e.g. motors"),
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Search criterion key=value (repeatable)"
    ),
    capacity: Optional[float] = typer.Option(None, "--capacity", "-c", help="Capacity within the record's band"),
    on_date: Optional[str] = typer.Option(None, "--date", help="Date within the record's range (YYYY-MM-DD)"),
    all_matches: bool = typer.Option(False, "--all", help="Print every match instead of the first"),
):
    """
    Find the record matching the search criteria and print it as JSON.

    Exits with code 1 when nothing matches.
    """
    criteria = dict(parse_criterion(text) for text in (where or []))
    query_date = None
    if on_date is not None:
        try:
            query_date = date.fromisoformat(on_date)
        except ValueError:
            raise typer.BadParameter(f"Invalid date '{on_date}'", param_hint="--date")

    state: CLIState = ctx.obj
    lookup = StandardsLookup(state.corpus(), use_index=state.config.use_index)
    try:
        if all_matches:
            result = lookup.find_all(table_name, criteria, capacity=capacity, date=query_date)
        else:
            result = lookup.find(table_name, criteria, capacity=capacity, date=query_date)
    except TableNotFound as e:
        err_console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)

    if not result:
        err_console.print(f"[yellow]![/yellow] No {table_name} record matches {criteria}")
        raise typer.Exit(code=1)

    typer.echo(json.dumps(thaw(result), indent=2))


@app.command()
def validate(
    ctx: typer.Context,
    strict: bool = typer.Option(False, "--strict", help="Exit with code 1 if any violation is found"),
):
    """
    Run the integrity checks and print every violation.

    Violations are advisory: the exit code is 0 unless --strict is given.
    """
    corpus = ctx.obj.corpus()
    violations = validate_corpus(corpus)

    for violation in violations:
        typer.echo(f"ERROR - {violation}")

    if violations:
        err_console.print(Panel.fit(
            f"[bold yellow]{len(violations)} violation(s)[/bold yellow] in {len(corpus)} tables",
            border_style="yellow",
        ))
        if strict:
            raise typer.Exit(code=1)
    else:
        err_console.print(Panel.fit(
            f"[bold green]No violations[/bold green] in {len(corpus)} tables",
            border_style="green",
        ))


@app.command()
def version():
    """Show version information."""
    from . import __version__
    console.print(f"Standards DB v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
