"""Configuration management commands."""

import typer
from rich.console import Console
from rich.table import Table

from wandergo.cli.config import (
    DEFAULTS,
    get_config_file,
    load_config,
    set_config_value,
)

config_app = typer.Typer(
    name="config",
    help="Manage CLI configuration",
)
console = Console()


@config_app.command("show")
def config_show() -> None:
    """Display current configuration, including defaults."""
    config = load_config()

    table = Table(title="WanderGo Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    for key in sorted(set(DEFAULTS) | set(config)):
        if key in config:
            table.add_row(key, str(config[key]), "config")
        else:
            table.add_row(key, str(DEFAULTS[key]), "default")

    console.print(table)
    console.print(f"\nConfig file: [dim]{get_config_file()}[/dim]")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key to set"),
    value: str = typer.Argument(..., help="Value to set"),
) -> None:
    """Set a configuration value.

    Examples:
        wandergo config set server_url http://localhost:5000
        wandergo config set poll_interval 10
    """
    if key not in DEFAULTS:
        console.print(f"[yellow]Unknown key '{key}', saving anyway.[/yellow]")
    set_config_value(key, value)
    console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [green]{value}[/green]")
    console.print(f"Config file: [dim]{get_config_file()}[/dim]")
