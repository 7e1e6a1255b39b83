"""Traveller profile and follow CLI commands.

These talk to the server directly; nothing here is cached or queued.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import anyio
import typer

from wandergo.cli.client import WanderGoApi
from wandergo.cli.context import build_runtime
from wandergo.cli.output import console, fail, render_detail, render_table, require_online
from wandergo.errors import WanderGoError

users_app = typer.Typer(name="users", help="Profiles and follows (requires a connection)")

USER_COLUMNS = [
    ("ID", "id", "cyan"),
    ("Username", "username", "green"),
    ("Name", "displayName", "white"),
]


async def _call_online(call: Callable[[WanderGoApi], Awaitable[Any]]) -> Any:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            return await call(runtime.api)
        except WanderGoError as e:
            fail(e)


@users_app.command("show")
def show_user(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Show a traveller's profile and stats."""
    profile = anyio.run(_call_online, lambda api: api.get_user_profile(user_id))
    render_detail(str(profile.get("displayName") or profile.get("username", user_id)), profile)


@users_app.command("followers")
def list_followers(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """List who follows a traveller."""
    followers = anyio.run(_call_online, lambda api: api.get_followers(user_id))
    render_table("Followers", followers, USER_COLUMNS, "No followers yet.")


@users_app.command("following")
def list_following(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """List who a traveller follows."""
    following = anyio.run(_call_online, lambda api: api.get_following(user_id))
    render_table("Following", following, USER_COLUMNS, "Not following anyone yet.")


@users_app.command("follow")
def follow_user(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Follow a traveller."""
    anyio.run(_call_online, lambda api: api.follow_user(user_id))
    console.print(f"[green]✓[/green] Now following {user_id}")


@users_app.command("unfollow")
def unfollow_user(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Stop following a traveller."""
    anyio.run(_call_online, lambda api: api.unfollow_user(user_id))
    console.print(f"[green]✓[/green] Stopped following {user_id}")
