"""Offline cache and sync queue CLI commands."""

from datetime import UTC, datetime

import anyio
import typer
from rich.table import Table

from wandergo.cli.client import get_server_url
from wandergo.cli.context import build_runtime
from wandergo.cli.output import console
from wandergo.cli.sync.queue import QueuedAction

offline_app = typer.Typer(name="offline", help="Inspect offline cache and pending sync")


def _render_queue(actions: list[QueuedAction]) -> None:
    if not actions:
        console.print("[green]No pending actions.[/green]")
        return

    table = Table(title="Pending Actions", show_header=True, header_style="bold yellow")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Action", style="green")
    table.add_column("Place", style="white")
    table.add_column("Queued At", style="dim")

    for action in actions:
        queued_at = datetime.fromtimestamp(action.timestamp / 1000, tz=UTC)
        table.add_row(
            action.id,
            action.type.value,
            str(action.data.get("placeId", "-")),
            queued_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)


@offline_app.command("status")
def offline_status() -> None:
    """Show connectivity, pending actions and cache size."""
    anyio.run(_offline_status_async)


async def _offline_status_async() -> None:
    async with build_runtime() as runtime:
        status = await runtime.refresh_status()

    if status.is_online:
        console.print(f"[green]Server: {get_server_url()}[/green]")
        console.print("[green]Status: Online[/green]")
    else:
        console.print(f"[red]Unable to reach server at {get_server_url()}.[/red]")
        console.print("[yellow]Status: Offline[/yellow]")

    if status.pending_actions:
        plural = "s" if status.pending_actions > 1 else ""
        console.print(f"[yellow]{status.pending_actions} action{plural} pending sync[/yellow]")
    else:
        console.print("No pending actions.")
    console.print(f"Cached entries: {status.cache_size}")


@offline_app.command("queue")
def show_queue() -> None:
    """List actions waiting to be synced."""
    anyio.run(_show_queue_async)


async def _show_queue_async() -> None:
    async with build_runtime() as runtime:
        actions = await runtime.queue.get_all()
    _render_queue(actions)


@offline_app.command("sync")
def sync_now() -> None:
    """Replay pending actions now."""
    anyio.run(_sync_now_async)


async def _sync_now_async() -> None:
    async with build_runtime() as runtime:
        if not await runtime.monitor.check():
            console.print(f"[red]Unable to reach server at {get_server_url()}.[/red]")
            raise typer.Exit(code=1)
        result = await runtime.sync()

    console.print(f"[green]✓[/green] Synced {result.processed} action(s)")
    if result.failed:
        console.print(f"[yellow]{result.failed} action(s) failed and stay queued[/yellow]")
        raise typer.Exit(code=1)


@offline_app.command("clear-cache")
def clear_cache() -> None:
    """Delete all cached data (pending actions are kept)."""
    anyio.run(_clear_cache_async)


async def _clear_cache_async() -> None:
    async with build_runtime() as runtime:
        status = await runtime.clear_cache()
    console.print(f"[green]✓[/green] Cache cleared ({status.cache_size} entries left)")


@offline_app.command("clear-queue")
def clear_queue(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Discard all pending actions without syncing them."""
    if not yes and not typer.confirm("Discard all pending actions?"):
        raise typer.Abort()
    anyio.run(_clear_queue_async)


async def _clear_queue_async() -> None:
    async with build_runtime() as runtime:
        await runtime.queue.clear()
    console.print("[green]✓[/green] Offline queue cleared")


@offline_app.command("watch")
def watch() -> None:
    """Poll connectivity and sync automatically on reconnect."""
    try:
        anyio.run(_watch_async)
    except KeyboardInterrupt:
        console.print("\nStopped watching.")


async def _watch_async() -> None:
    async with build_runtime() as runtime:

        def on_network(online: bool) -> None:
            if online:
                console.print("[green]● Online[/green] - syncing pending actions")
            else:
                console.print("[yellow]● Offline[/yellow] - using cached data")

        def on_queue(count: int) -> None:
            console.print(f"[dim]{count} action(s) pending sync[/dim]")

        unsubscribe_queue = runtime.queue.subscribe(on_queue)
        unsubscribe_network = runtime.monitor.subscribe(on_network)
        await runtime.monitor.check()
        await runtime.sync_pending()
        console.print(
            f"Watching {get_server_url()} every {runtime.monitor.interval:g}s (Ctrl+C to stop)"
        )
        try:
            await anyio.sleep_forever()
        finally:
            unsubscribe_network()
            unsubscribe_queue()
