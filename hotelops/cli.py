"""Hotel operations CLI - database setup and maintenance jobs."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import settings

app = typer.Typer(
    name="hotelops",
    help="Hotel operations back end - setup and maintenance commands",
    no_args_is_help=True,
)
console = Console()


@app.command("init-db")
def init_db():
    """Create all tables in the configured SQL database."""
    from .database import create_all, engine

    async def _run():
        try:
            await create_all()
        finally:
            await engine.dispose()

    asyncio.run(_run())
    console.print(f"[green]Tables created[/green] at {settings.database_url}")


@app.command("sweep-overdue")
def sweep_overdue():
    """Mark pending housekeeping requests past their due time as overdue."""
    from .store import build_store
    from .worker import OverdueSweepWorker

    async def _run() -> int:
        store = build_store(settings)
        try:
            return await OverdueSweepWorker(store, enabled=False).sweep_once()
        finally:
            close = getattr(store, "close", None)
            if close is not None:
                await close()
            if settings.store_backend == "sql":
                from .database import engine
                await engine.dispose()

    try:
        count = asyncio.run(_run())
    except Exception as e:
        console.print(f"[red]Sweep failed:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"Marked [bold]{count}[/bold] housekeeping request(s) overdue")


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    console.print(f"[bold cyan]Starting hotel operations API at http://{host}:{port}[/bold cyan]")
    uvicorn.run("hotelops.app:app", host=host, port=port, reload=reload)


@app.command()
def config():
    """Show the effective configuration."""
    table = Table(title="Hotel Operations Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Store backend", settings.store_backend)
    if settings.store_backend == "rest":
        table.add_row("Store URL", settings.store_url or "[red]Not set[/red]")
        table.add_row("Store key", "Set" if settings.store_key else "[red]Not set[/red]")
    else:
        table.add_row("Database URL", settings.database_url)
    table.add_row(
        "Retry",
        f"{settings.retry_max_attempts} attempts, {settings.retry_base_delay_ms}ms "
        f"x{settings.retry_backoff_factor}",
    )
    table.add_row("Sweep interval", f"{settings.sweep_interval_seconds:g}s")
    console.print(table)


@app.command()
def version():
    """Show version."""
    console.print(f"hotelops v{__version__}")


if __name__ == "__main__":
    app()
