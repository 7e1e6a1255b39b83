"""Place discovery CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import (
    console,
    fail,
    print_mutation_result,
    print_offline_banner,
    render_detail,
    render_table,
    require_online,
)
from wandergo.errors import WanderGoError

places_app = typer.Typer(name="places", help="Discover places")

PLACE_COLUMNS = [
    ("ID", "id", "cyan"),
    ("Name", "name", "green"),
    ("Category", "category", "yellow"),
    ("City", "city", "white"),
    ("Rating", "avgRating", "magenta"),
]
NEARBY_COLUMNS = [*PLACE_COLUMNS, ("Distance (km)", "distance", "dim")]
REVIEW_COLUMNS = [
    ("Rating", "rating", "magenta"),
    ("Review", "content", "white"),
    ("Visited", "visitDate", "yellow"),
    ("Likes", "likesCount", "dim"),
]
COMMUNITY_COLUMNS = [("Place", "placeId", "cyan"), *REVIEW_COLUMNS]


@places_app.command("list")
def list_places(
    city: str | None = typer.Option(None, "--city", help="Filter by city"),
    category: str | None = typer.Option(None, "--category", help="Filter by category"),
    search: str | None = typer.Option(None, "--search", help="Search name and description"),
    limit: int | None = typer.Option(None, "--limit", help="Maximum number of places"),
) -> None:
    """List places."""
    anyio.run(_list_places_async, city, category, search, limit)


async def _list_places_async(
    city: str | None, category: str | None, search: str | None, limit: int | None
) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            places = await runtime.offline.get_places(
                city=city, category=category, search=search, limit=limit
            )
        except WanderGoError as e:
            fail(e)
    render_table("Places", places, PLACE_COLUMNS, "No places found.")


@places_app.command("show")
def show_place(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """Show a single place."""
    anyio.run(_show_place_async, place_id)


async def _show_place_async(place_id: str) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            place = await runtime.offline.get_place(place_id)
        except WanderGoError as e:
            fail(e)
    render_detail(str(place.get("name", place_id)), place)


@places_app.command("popular")
def popular_places(
    limit: int = typer.Option(10, "--limit", help="Maximum number of places"),
) -> None:
    """List the highest-rated places."""
    anyio.run(_popular_places_async, limit)


async def _popular_places_async(limit: int) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            places = await runtime.offline.get_popular_places(limit)
        except WanderGoError as e:
            fail(e)
    render_table("Popular Places", places, PLACE_COLUMNS, "No popular places found.")


@places_app.command("nearby")
def nearby_places(
    lat: float = typer.Argument(..., help="Latitude"),
    lng: float = typer.Argument(..., help="Longitude"),
    radius: float = typer.Option(20.0, "--radius", help="Search radius in km"),
    limit: int = typer.Option(10, "--limit", help="Maximum number of places"),
) -> None:
    """List places near a coordinate."""
    anyio.run(_nearby_places_async, lat, lng, radius, limit)


async def _nearby_places_async(lat: float, lng: float, radius: float, limit: int) -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            places = await runtime.offline.get_nearby_places(lat, lng, radius, limit)
        except WanderGoError as e:
            fail(e)
    render_table("Nearby Places", places, NEARBY_COLUMNS, "No places nearby.")


@places_app.command("save")
def save_places() -> None:
    """Download every place for offline use."""
    anyio.run(_save_places_async)


async def _save_places_async() -> None:
    async with build_runtime() as runtime:
        if not await runtime.monitor.check():
            console.print("[red]Cannot save places while offline.[/red]")
            raise typer.Exit(code=1)
        try:
            places = await runtime.offline.get_places()
        except WanderGoError as e:
            fail(e)
    console.print(f"[green]✓[/green] Saved {len(places)} places for offline use")


@places_app.command("review")
def review_place(
    place_id: str = typer.Argument(..., help="Place ID"),
    rating: int = typer.Option(..., "--rating", min=1, max=5, help="Rating from 1 to 5"),
    content: str | None = typer.Option(None, "--content", help="Review text"),
    visit_date: str | None = typer.Option(None, "--visit-date", help="Visit date (YYYY-MM-DD)"),
) -> None:
    """Write a review (queued when offline)."""
    anyio.run(_review_place_async, place_id, rating, content, visit_date)


async def _review_place_async(
    place_id: str, rating: int, content: str | None, visit_date: str | None
) -> None:
    async with build_runtime() as runtime:
        await runtime.monitor.check()
        try:
            result = await runtime.offline.create_review(
                place_id, rating, content=content, visit_date=visit_date
            )
        except WanderGoError as e:
            fail(e)
    print_mutation_result(result, f"Review posted for place {place_id}")


@places_app.command("reviews")
def place_reviews(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """List reviews of a place (requires a connection)."""
    anyio.run(_place_reviews_async, place_id)


async def _place_reviews_async(place_id: str) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            reviews = await runtime.api.get_place_reviews(place_id)
        except WanderGoError as e:
            fail(e)
    render_table(f"Reviews of {place_id}", reviews, REVIEW_COLUMNS, "No reviews yet.")


@places_app.command("community")
def community_reviews(
    limit: int = typer.Option(20, "--limit", help="Maximum number of reviews"),
) -> None:
    """Show the latest reviews from all travellers (requires a connection)."""
    anyio.run(_community_reviews_async, limit)


async def _community_reviews_async(limit: int) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            reviews = await runtime.api.get_community_reviews(limit=limit)
        except WanderGoError as e:
            fail(e)
    render_table("Community reviews", reviews, COMMUNITY_COLUMNS, "No reviews yet.")


@places_app.command("article")
def place_article(place_id: str = typer.Argument(..., help="Place ID")) -> None:
    """Generate a travel article about a place (requires a connection)."""
    anyio.run(_place_article_async, place_id)


async def _place_article_async(place_id: str) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            result = await runtime.api.generate_article(place_id)
        except WanderGoError as e:
            fail(e)
    console.print(result.get("article") or "[yellow]No article was generated.[/yellow]")
