"""Visited places CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import fail, print_mutation_result, print_offline_banner, render_table
from wandergo.errors import WanderGoError

visited_app = typer.Typer(name="visited", help="Track visited places")

VISITED_COLUMNS = [
    ("Place ID", "placeId", "cyan"),
    ("Name", "name", "green"),
    ("City", "city", "white"),
    ("Visited", "visitedAt", "dim"),
]


@visited_app.command("list")
def list_visited() -> None:
    """List visited places."""
    anyio.run(_list_visited_async)


async def _list_visited_async() -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            visited = await runtime.offline.get_visited()
        except WanderGoError as e:
            fail(e)
    rows = [{**item, **(item.get("place") or {})} for item in visited]
    render_table("Visited Places", rows, VISITED_COLUMNS, "No visited places yet.")


@visited_app.command("mark")
def mark_visited(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """Mark a place as visited (queued when offline)."""
    anyio.run(_mark_visited_async, place_id)


async def _mark_visited_async(place_id: str) -> None:
    async with build_runtime() as runtime:
        await runtime.monitor.check()
        try:
            result = await runtime.offline.mark_visited(place_id)
        except WanderGoError as e:
            fail(e)
    print_mutation_result(result, f"Marked {place_id} as visited")
