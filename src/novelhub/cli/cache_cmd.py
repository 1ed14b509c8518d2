"""CLI commands for the catalog cache.

Usage:
    novelhub cache ping
    novelhub cache policy
    novelhub cache invalidate novel n123
    novelhub cache invalidate-type novel_listing
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from novelhub.cache import CatalogCache, EntityRef, EntityType, TtlPolicy, build_catalog_cache
from novelhub.config import settings

app = typer.Typer(help="Inspect and invalidate the catalog cache", no_args_is_help=True)
console = Console()


def _open_cache() -> CatalogCache:
    cache = build_catalog_cache(settings, server_context=True)
    if not cache.enabled:
        console.print(
            "[red]Cache is not configured[/red] (set KV_REST_API_URL and KV_REST_API_TOKEN)"
        )
        raise typer.Exit(code=1)
    return cache


@app.command("ping")
def ping() -> None:
    """Check cache connectivity."""
    healthy = asyncio.run(_ping(_open_cache()))
    if not healthy:
        console.print("[red]Cache unreachable[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Cache reachable[/green]")


async def _ping(cache: CatalogCache) -> bool:
    try:
        return await cache.health_check()
    finally:
        await cache.close()


@app.command("policy")
def policy() -> None:
    """Show the TTL per entity type."""
    ttl_policy = TtlPolicy.from_settings(settings)
    table = Table(title="Cache TTLs")
    table.add_column("Entity type", style="cyan")
    table.add_column("TTL (s)", justify="right")
    for entity_type in EntityType:
        table.add_row(entity_type.value, str(ttl_policy.ttl_for(entity_type)))
    console.print(table)


@app.command("invalidate")
def invalidate(
    entity_type: EntityType = typer.Argument(..., help="Entity type"),
    entity_id: str = typer.Argument(..., help="Entity identifier"),
) -> None:
    """Invalidate the cached entry of one entity."""
    cache = _open_cache()
    ref = EntityRef(entity_type, entity_id)
    key = cache.keys.derive(ref)
    if not asyncio.run(_invalidate(cache, ref)):
        console.print(f"[red]Failed to invalidate[/red] {key}")
        raise typer.Exit(code=1)
    console.print(f"[green]Invalidated[/green] {key}")


async def _invalidate(cache: CatalogCache, ref: EntityRef) -> bool:
    try:
        return await cache.invalidate(ref)
    finally:
        await cache.close()


@app.command("invalidate-type")
def invalidate_type(
    entity_type: EntityType = typer.Argument(..., help="Entity type"),
) -> None:
    """Invalidate every cached entry of an entity type."""
    deleted = asyncio.run(_invalidate_type(_open_cache(), entity_type))
    console.print(f"[green]Deleted {deleted} cached {entity_type.value} entries[/green]")


async def _invalidate_type(cache: CatalogCache, entity_type: EntityType) -> int:
    try:
        return await cache.invalidate_entity_type(entity_type)
    finally:
        await cache.close()
