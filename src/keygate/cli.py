"""Typer CLI for Keygate."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="keygate", help="Keygate: device license key administration")
console = Console()


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind host (defaults to KEYGATE_HOST)"),
    port: int = typer.Option(None, help="Bind port (defaults to KEYGATE_PORT)"),
):
    """Start the Keygate API server."""
    import uvicorn
    from keygate.app import create_app
    from keygate.common.config import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting Keygate on {host}:{port}[/bold green]")
    uvicorn.run(create_app(settings), host=host, port=port)


@app.command("init-db")
def init_db():
    """Create tables and seed the default accounts."""
    from keygate.common.config import get_settings
    from keygate.deps import build_services

    async def _run() -> list[str]:
        services = build_services(get_settings())
        await services.startup()
        try:
            async with services.db.get_session() as session:
                return [u.username for u in await services.users.list_users(session)]
        finally:
            await services.shutdown()

    usernames = asyncio.run(_run())
    console.print(f"[bold green]Database ready[/bold green] — users: {', '.join(usernames)}")


@app.command()
def generate(
    count: int = typer.Option(1, min=1, max=100, help="How many keys to print"),
):
    """Generate license keys (offline, no DB required)."""
    from keygate.keygen.generator import generate_key

    for _ in range(count):
        console.print(f"[bold]{generate_key()}[/bold]")


@app.command()
def durations():
    """List the issuance durations and their offsets."""
    from keygate.keygen.durations import DURATION_OFFSETS

    table = Table("Duration", "Expires after")
    for duration, offset in DURATION_OFFSETS.items():
        table.add_row(duration.value, f"{offset.days} days" if offset else "never")
    console.print(table)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Keygate server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] — v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
