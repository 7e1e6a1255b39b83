"""Achievement CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import (
    console,
    fail,
    print_offline_banner,
    render_table,
    require_online,
)
from wandergo.errors import WanderGoError

achievements_app = typer.Typer(name="achievements", help="View achievements")

ACHIEVEMENT_COLUMNS = [
    ("Name", "name", "green"),
    ("Description", "description", "white"),
    ("Earned", "earnedAt", "yellow"),
]


@achievements_app.command("list")
def list_achievements() -> None:
    """List earned achievements."""
    anyio.run(_list_achievements_async)


async def _list_achievements_async() -> None:
    async with build_runtime() as runtime:
        print_offline_banner(await runtime.monitor.check())
        try:
            achievements = await runtime.offline.get_achievements()
        except WanderGoError as e:
            fail(e)
    rows = [{**item, **(item.get("achievement") or {})} for item in achievements]
    render_table("Achievements", rows, ACHIEVEMENT_COLUMNS, "No achievements earned yet.")


@achievements_app.command("check")
def check_achievements() -> None:
    """Ask the server to award newly earned achievements (requires a connection)."""
    anyio.run(_check_achievements_async)


async def _check_achievements_async() -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            awarded = await runtime.api.check_achievements()
        except WanderGoError as e:
            fail(e)
    if not awarded:
        console.print("No new achievements.")
        return
    rows = [{**item, **(item.get("achievement") or {})} for item in awarded]
    render_table("New achievements", rows, ACHIEVEMENT_COLUMNS, "No new achievements.")
