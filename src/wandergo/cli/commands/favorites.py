"""Favorite places CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import fail, print_mutation_result, print_offline_banner, render_table
from wandergo.errors import WanderGoError

favorites_app = typer.Typer(name="favorites", help="Manage favorite places")

FAVORITE_COLUMNS = [
    ("Place ID", "placeId", "cyan"),
    ("Name", "name", "green"),
    ("City", "city", "white"),
    ("Added", "createdAt", "dim"),
]


@favorites_app.command("list")
def list_favorites() -> None:
    """List favorite places."""
    anyio.run(_list_favorites_async)


async def _list_favorites_async() -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            favorites = await runtime.offline.get_favorites()
        except WanderGoError as e:
            fail(e)
    rows = [{**item, **(item.get("place") or {})} for item in favorites]
    render_table("Favorites", rows, FAVORITE_COLUMNS, "No favorites yet.")


@favorites_app.command("add")
def add_favorite(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """Add a place to favorites (queued when offline)."""
    anyio.run(_toggle_favorite_async, place_id, True)


@favorites_app.command("remove")
def remove_favorite(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """Remove a place from favorites (queued when offline)."""
    anyio.run(_toggle_favorite_async, place_id, False)


async def _toggle_favorite_async(place_id: str, add: bool) -> None:
    async with build_runtime() as runtime:
        await runtime.monitor.check()
        try:
            if add:
                result = await runtime.offline.add_favorite(place_id)
            else:
                result = await runtime.offline.remove_favorite(place_id)
        except WanderGoError as e:
            fail(e)
    action = "Added" if add else "Removed"
    print_mutation_result(result, f"{action} favorite {place_id}")
