"""CLI commands for NovelHub.

Provides command-line interface using Typer:
- novelhub serve: Run the API server
- novelhub cache: Inspect and invalidate the catalog cache
- novelhub import-novels: Import novels into the catalog store

Usage:
    novelhub --help
    novelhub serve --port 8080
    novelhub cache invalidate novel n123
    novelhub import-novels export.json
"""

import typer

from novelhub.cli.cache_cmd import app as cache_app
from novelhub.cli.import_cmd import import_novels
from novelhub.cli.serve import app as serve_app

app = typer.Typer(
    name="novelhub",
    help="NovelHub: novel catalog service with a read-through cache",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(cache_app, name="cache")
app.command("import-novels")(import_novels)


@app.callback()
def callback() -> None:
    """NovelHub: novel catalog service with a read-through cache."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
