"""Saved route CLI commands."""

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

routes_app = typer.Typer(name="routes", help="Browse and plan routes")

ROUTE_COLUMNS = [
    ("ID", "id", "cyan"),
    ("Name", "name", "green"),
    ("Type", "routeType", "yellow"),
    ("Places", "placeIds", "white"),
    ("Duration (min)", "estimatedDuration", "dim"),
]


@routes_app.command("list")
def list_routes() -> None:
    """List your routes."""
    anyio.run(_list_routes_async)


async def _list_routes_async() -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            routes = await runtime.offline.get_routes()
        except WanderGoError as e:
            fail(e)
    render_table("Routes", routes, ROUTE_COLUMNS, "No routes saved.")


@routes_app.command("show")
def show_route(route_id: str = typer.Argument(..., help="Route ID")) -> None:
    """Show a single route."""
    anyio.run(_show_route_async, route_id)


async def _show_route_async(route_id: str) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            route = await runtime.offline.get_route(route_id)
        except WanderGoError as e:
            fail(e)
    render_detail(str(route.get("name", route_id)), route)


@routes_app.command("public")
def public_routes(
    limit: int = typer.Option(20, "--limit", help="Maximum number of routes"),
) -> None:
    """List routes other travellers have shared (requires a connection)."""
    anyio.run(_public_routes_async, limit)


async def _public_routes_async(limit: int) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            routes = await runtime.api.get_public_routes(limit=limit)
        except WanderGoError as e:
            fail(e)
    render_table("Public routes", routes, ROUTE_COLUMNS, "No public routes yet.")


@routes_app.command("create")
def create_route(
    name: str = typer.Argument(..., help="Route name"),
    place_ids: list[str] = typer.Option(..., "--place", help="Place ID, in visiting order"),
    route_type: str = typer.Option("walking", "--type", help="walking, driving or transit"),
    description: str | None = typer.Option(None, "--description", help="Route description"),
    duration: int | None = typer.Option(None, "--duration", help="Estimated minutes"),
    public: bool = typer.Option(False, "--public", help="Share the route with others"),
) -> None:
    """Save a new route (requires a connection)."""
    anyio.run(_create_route_async, name, place_ids, route_type, description, duration, public)


async def _create_route_async(
    name: str,
    place_ids: list[str],
    route_type: str,
    description: str | None,
    duration: int | None,
    public: bool,
) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            route = await runtime.api.create_route(
                name,
                place_ids,
                route_type=route_type,
                description=description,
                estimated_duration=duration,
                is_public=public,
            )
        except WanderGoError as e:
            fail(e)
    console.print(f"[green]✓[/green] Created route [cyan]{route.get('id', name)}[/cyan]")


@routes_app.command("delete")
def delete_route(route_id: str = typer.Argument(..., help="Route ID")) -> None:
    """Delete a route (requires a connection)."""
    anyio.run(_delete_route_async, route_id)


async def _delete_route_async(route_id: str) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            await runtime.api.delete_route(route_id)
        except WanderGoError as e:
            fail(e)
    console.print(f"[green]✓[/green] Deleted route {route_id}")
