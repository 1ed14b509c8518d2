"""CLI command for importing novels into the catalog store.

Usage:
    novelhub import-novels export.json
    novelhub import-novels export.json --dry-run

The input is either a JSON array of novels or an object with a "novels"
array. Imported novels are invalidated in the cache, as are all cached
listings.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console

from novelhub.cache import LoaderError, build_catalog_cache
from novelhub.catalog import CatalogService, JsonCatalogStore
from novelhub.config import settings
from novelhub.core.model import Novel

console = Console()


def load_novels(path: Path) -> list[Novel]:
    """Parse and validate novels from an export file.

    Raises:
        ValueError: If the file is not a valid novel export.
    """
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    items = data.get("novels") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("Expected a JSON array of novels or an object with a 'novels' array")

    try:
        return [Novel.model_validate(item) for item in items]
    except ValidationError as e:
        raise ValueError(f"Invalid novel: {e}") from e


def import_novels(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with novels to import",
    ),
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        "-c",
        help="Catalog file to import into (defaults to CATALOG_PATH)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Validate only, don't import",
    ),
) -> None:
    """Import novels and invalidate their cache entries."""
    try:
        novels = load_novels(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading {path}:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[blue]Parsed {len(novels)} novels from[/blue] {path}")
    if dry_run:
        console.print("[yellow]Dry run mode - no changes made[/yellow]")
        return

    catalog_path = catalog or Path(settings.catalog_path)
    if not catalog_path.exists():
        catalog_path.write_bytes(orjson.dumps({"novels": [], "authors": []}))
        console.print(f"[blue]Created empty catalog[/blue] {catalog_path}")

    try:
        count = asyncio.run(_import(novels, catalog_path))
    except LoaderError as e:
        console.print(f"[red]Import failed:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Imported {count} novels into[/green] {catalog_path}")


async def _import(novels: list[Novel], catalog_path: Path) -> int:
    store = JsonCatalogStore(catalog_path)
    cache = build_catalog_cache(settings, server_context=True)
    try:
        return await CatalogService(store, cache).import_novels(novels)
    finally:
        await cache.close()
        await store.close()
