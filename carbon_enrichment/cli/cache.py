"""Cache commands.

Only meaningful with the disk backend; the memory backend lives and dies
with a single command.
"""

from pathlib import Path
from typing import Optional

import typer

from carbon_enrichment.cli.utils import (
    display_success,
    display_warning,
    handle_errors,
    load_config,
)
from carbon_enrichment.models.cache import CacheBackend
from carbon_enrichment.services.cache_service import CacheStore

cache_app = typer.Typer(help="Inspect and invalidate the response cache")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config file")


def _open_store(config_path: Optional[Path]) -> CacheStore:
    config = load_config(config_path)
    if config.cache.backend != CacheBackend.DISK:
        display_warning("Cache backend is 'memory'; nothing persists between runs")
    return CacheStore(config.cache)


@cache_app.command(name="stats")
@handle_errors
def cache_stats(config_path: Optional[Path] = ConfigOption):
    """Show cache size, purging expired entries first."""
    store = _open_store(config_path)
    try:
        purged = store.purge_expired()
        typer.echo(f"Cached entries: {store.size()} (purged {purged} expired)")
    finally:
        store.close()


@cache_app.command(name="clear")
@handle_errors
def cache_clear(config_path: Optional[Path] = ConfigOption):
    """Remove every cached response."""
    store = _open_store(config_path)
    try:
        store.clear()
        display_success("Cache cleared")
    finally:
        store.close()


@cache_app.command(name="invalidate")
@handle_errors
def cache_invalidate(
    pattern: str = typer.Argument(..., help="Regex matched against 'METHOD url'"),
    config_path: Optional[Path] = ConfigOption,
):
    """Remove cached responses whose request line matches PATTERN."""
    store = _open_store(config_path)
    try:
        removed = store.invalidate_pattern(pattern)
        display_success(f"Invalidated {removed} cached responses")
    finally:
        store.close()
