"""Itinerary CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import (
    console,
    fail,
    print_offline_banner,
    render_detail,
    render_table,
    require_online,
)
from wandergo.errors import WanderGoError

itineraries_app = typer.Typer(name="itineraries", help="Plan and browse daily itineraries")

ITINERARY_COLUMNS = [
    ("ID", "id", "cyan"),
    ("Title", "title", "green"),
    ("Date", "date", "yellow"),
    ("City", "city", "white"),
    ("Places", "placeIds", "white"),
    ("Done", "isCompleted", "dim"),
]


@itineraries_app.command("list")
def list_itineraries() -> None:
    """List your itineraries."""
    anyio.run(_list_itineraries_async)


async def _list_itineraries_async() -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            itineraries = await runtime.offline.get_itineraries()
        except WanderGoError as e:
            fail(e)
    render_table("Itineraries", itineraries, ITINERARY_COLUMNS, "No itineraries yet.")


@itineraries_app.command("show")
def show_itinerary(itinerary_id: str = typer.Argument(..., help="Itinerary ID")) -> None:
    """Show a single itinerary."""
    anyio.run(_show_itinerary_async, itinerary_id)


async def _show_itinerary_async(itinerary_id: str) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            itinerary = await runtime.offline.get_itinerary(itinerary_id)
        except WanderGoError as e:
            fail(e)
    render_detail(str(itinerary.get("title", itinerary_id)), itinerary)


@itineraries_app.command("generate")
def generate_itinerary(
    place_ids: list[str] = typer.Option(..., "--place", help="Place ID to include"),
    route_type: str = typer.Option("walking", "--type", help="walking, driving or transit"),
    hours: float = typer.Option(8, "--hours", help="Hours available for the day"),
) -> None:
    """Draft a schedule for a set of places without saving it (requires a connection)."""
    anyio.run(_generate_itinerary_async, place_ids, route_type, hours)


async def _generate_itinerary_async(place_ids: list[str], route_type: str, hours: float) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            result = await runtime.api.generate_itinerary(
                place_ids, route_type=route_type, available_hours=hours
            )
        except WanderGoError as e:
            fail(e)
    console.print(result.get("itinerary") or "[yellow]No schedule was generated.[/yellow]")


@itineraries_app.command("create")
def create_itinerary(
    title: str = typer.Argument(..., help="Itinerary title"),
    date: str = typer.Option(..., "--date", help="Day of the trip (YYYY-MM-DD)"),
    place_ids: list[str] = typer.Option(..., "--place", help="Place ID to include"),
    city: str | None = typer.Option(None, "--city", help="City"),
    country: str | None = typer.Option(None, "--country", help="Country"),
    route_type: str = typer.Option("walking", "--type", help="walking, driving or transit"),
    hours: float = typer.Option(8, "--hours", help="Hours available for the day"),
) -> None:
    """Save a new itinerary with a generated schedule (requires a connection)."""
    anyio.run(
        _create_itinerary_async, title, date, place_ids, city, country, route_type, hours
    )


async def _create_itinerary_async(
    title: str,
    date: str,
    place_ids: list[str],
    city: str | None,
    country: str | None,
    route_type: str,
    hours: float,
) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            itinerary = await runtime.api.create_itinerary(
                title,
                date,
                place_ids,
                city=city,
                country=country,
                route_type=route_type,
                available_hours=hours,
            )
        except WanderGoError as e:
            fail(e)
    console.print(
        f"[green]✓[/green] Created itinerary [cyan]{itinerary.get('id', title)}[/cyan]"
    )


@itineraries_app.command("complete")
def complete_itinerary(
    itinerary_id: str = typer.Argument(..., help="Itinerary ID"),
    undo: bool = typer.Option(False, "--undo", help="Mark as not completed"),
) -> None:
    """Mark an itinerary as completed (requires a connection)."""
    anyio.run(_complete_itinerary_async, itinerary_id, undo)


async def _complete_itinerary_async(itinerary_id: str, undo: bool) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            await runtime.api.update_itinerary(itinerary_id, is_completed=not undo)
        except WanderGoError as e:
            fail(e)
    state = "not completed" if undo else "completed"
    console.print(f"[green]✓[/green] Marked itinerary {itinerary_id} as {state}")


@itineraries_app.command("delete")
def delete_itinerary(itinerary_id: str = typer.Argument(..., help="Itinerary ID")) -> None:
    """Delete an itinerary (requires a connection)."""
    anyio.run(_delete_itinerary_async, itinerary_id)


async def _delete_itinerary_async(itinerary_id: str) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            await runtime.api.delete_itinerary(itinerary_id)
        except WanderGoError as e:
            fail(e)
    console.print(f"[green]✓[/green] Deleted itinerary {itinerary_id}")
