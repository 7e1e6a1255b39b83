"""Main CLI application using Typer."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from wandergo import __version__
from wandergo.cli.commands.achievements import achievements_app
from wandergo.cli.commands.auth import auth_app
from wandergo.cli.commands.config import config_app
from wandergo.cli.commands.favorites import favorites_app
from wandergo.cli.commands.itineraries import itineraries_app
from wandergo.cli.commands.offline import offline_app
from wandergo.cli.commands.places import places_app
from wandergo.cli.commands.routes import routes_app
from wandergo.cli.commands.users import users_app
from wandergo.cli.commands.visited import visited_app

app = typer.Typer(
    name="wandergo",
    help="WanderGo - travel discovery that keeps working offline",
    add_completion=False,
)
console = Console()

# Register subcommands
app.add_typer(config_app, name="config")
app.add_typer(auth_app, name="auth")
app.add_typer(places_app, name="places")
app.add_typer(favorites_app, name="favorites")
app.add_typer(visited_app, name="visited")
app.add_typer(routes_app, name="routes")
app.add_typer(itineraries_app, name="itineraries")
app.add_typer(achievements_app, name="achievements")
app.add_typer(users_app, name="users")
app.add_typer(offline_app, name="offline")


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"WanderGo version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """WanderGo CLI - discover places online and offline."""
    configure_logging(verbose)


if __name__ == "__main__":
    app()
