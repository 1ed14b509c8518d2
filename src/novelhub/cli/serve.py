"""CLI command for running the API server.

Usage:
    novelhub serve
    novelhub serve --port 8080 --host 0.0.0.0
    novelhub serve --reload --log-level debug
"""

from __future__ import annotations

import typer

app = typer.Typer(help="Run the NovelHub API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(
        "0.0.0.0",  # nosec B104 - intentional for container deployments
        "--host",
        "-h",
        help="Host to bind to",
    ),
    port: int = typer.Option(
        8080,
        "--port",
        "-p",
        help="Port to listen on",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        "-w",
        help="Number of worker processes",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
) -> None:
    """Run the NovelHub API server.

    Each worker process builds its own cache client at startup.
    """
    import uvicorn

    workers_effective = workers if not reload else 1  # Reload requires single worker

    typer.echo("Starting NovelHub server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Workers: {workers_effective}")
    typer.echo(f"  Log level: {log_level}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="novelhub.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers_effective,
        log_level=log_level.lower(),
    )
