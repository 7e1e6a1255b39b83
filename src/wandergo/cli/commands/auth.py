"""Authentication CLI commands."""

import anyio
import typer

from wandergo.cli.context import build_runtime
from wandergo.cli.output import console, fail, require_online
from wandergo.errors import WanderGoError

auth_app = typer.Typer(name="auth", help="Log in and out")


@auth_app.command("login")
def login(
    username: str = typer.Argument(..., help="Username"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    """Log in and store the access token locally."""
    anyio.run(_login_async, username, password)


async def _login_async(username: str, password: str) -> None:
    async with build_runtime() as runtime:
        try:
            user = await runtime.api.login(username, password)
        except WanderGoError as e:
            fail(e)
    name = user.get("displayName") or user.get("username") or username
    console.print(f"[green]✓[/green] Logged in as [cyan]{name}[/cyan]")


@auth_app.command("logout")
def logout() -> None:
    """Forget the stored access token."""
    anyio.run(_logout_async)


async def _logout_async() -> None:
    async with build_runtime() as runtime:
        try:
            await runtime.api.logout()
        except WanderGoError as e:
            fail(e)
    console.print("[green]✓[/green] Logged out")


@auth_app.command("whoami")
def whoami() -> None:
    """Show the logged-in user."""
    anyio.run(_whoami_async)


async def _whoami_async() -> None:
    async with build_runtime() as runtime:
        user = await runtime.api.get_stored_user()
    if not user:
        console.print("[yellow]Not logged in.[/yellow] Log in with:")
        console.print("  wandergo auth login <username>")
        raise typer.Exit(code=1)
    console.print(f"Logged in as [cyan]{user.get('username', '-')}[/cyan]")


@auth_app.command("register")
def register(
    username: str = typer.Argument(..., help="Username"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    display_name: str | None = typer.Option(None, "--display-name", help="Name shown to others"),
) -> None:
    """Create an account and log in (requires a connection)."""
    anyio.run(_register_async, username, password, display_name)


async def _register_async(username: str, password: str, display_name: str | None) -> None:
    async with build_runtime() as runtime:
        require_online(await runtime.monitor.check())
        try:
            user = await runtime.api.register(username, password, display_name=display_name)
        except WanderGoError as e:
            fail(e)
    name = user.get("displayName") or user.get("username") or username
    console.print(f"[green]✓[/green] Registered and logged in as [cyan]{name}[/cyan]")
