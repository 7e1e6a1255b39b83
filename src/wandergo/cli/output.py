"""Shared console rendering for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

console = Console()

OFFLINE_BANNER = "[yellow]⚠ Offline mode - showing cached data[/yellow]"


def fail(exc: Exception) -> NoReturn:
    """Print an error in red and exit with status 1."""
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1) from exc


def print_offline_banner(online: bool) -> None:
    if not online:
        console.print(OFFLINE_BANNER)


def require_online(online: bool) -> None:
    """Exit with status 1 when a command cannot run without the server."""
    if not online:
        console.print("[red]This command needs a connection to the WanderGo server.[/red]")
        raise typer.Exit(code=1)


def print_mutation_result(result: Any, done_message: str) -> None:
    """Report either a queued acknowledgement or a completed call."""
    if isinstance(result, dict) and result.get("queued"):
        console.print(f"[yellow]⏳ {result.get('message', 'Queued for sync')}[/yellow]")
        return
    console.print(f"[green]✓[/green] {done_message}")


def render_table(
    title: str,
    items: Sequence[dict[str, Any]],
    columns: Sequence[tuple[str, str, str]],
    empty_message: str,
) -> None:
    """Render dict rows; ``columns`` holds (header, key, style) triples."""
    if not items:
        console.print(empty_message)
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    for header, _, style in columns:
        table.add_column(header, style=style)

    for item in items:
        row = []
        for _, key, _ in columns:
            value = item.get(key)
            if isinstance(value, float):
                row.append(f"{value:.1f}")
            elif isinstance(value, list):
                row.append(str(len(value)))
            else:
                row.append("-" if value in (None, "") else str(value))
        table.add_row(*row)

    console.print(table)


def render_detail(title: str, item: dict[str, Any]) -> None:
    """Render a single record as a key/value table."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in item.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value)
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)
