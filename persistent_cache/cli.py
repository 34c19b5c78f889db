"""CLI interface for persistent_cache."""

import logging
from datetime import datetime

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from persistent_cache.cache import Cache
from persistent_cache.consts import (
    DEFAULT_STORAGE_KIND,
    ENV_ENCODING,
    ENV_FRESH,
    ENV_STORAGE,
    ENV_STORAGE_DETAILS,
    FRESH,
)
from persistent_cache.exceptions import StorageError
from persistent_cache.models.common import _utc_now, ensure_utc
from persistent_cache.models.model_config import CacheConfig

app = typer.Typer(
    name="pcache",
    help="pcache - Inspect and edit a persistent key-value cache",
)

console = Console()


def _format_age(seconds: float) -> str:
    """Human-readable age."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.0f}m"
    elif seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    else:
        return f"{seconds / 86400:.1f}d"


def _decode(value: object) -> str:
    """Render a stored value for the terminal."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _open_cache(ctx: typer.Context) -> Cache:
    config: CacheConfig = ctx.obj
    try:
        return Cache.from_config(config)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    storage_details: str = typer.Option(
        ...,
        "--storage-details",
        "-d",
        envvar=ENV_STORAGE_DETAILS,
        help="SQLite file, root directory or RAM label",
    ),
    storage: str = typer.Option(
        DEFAULT_STORAGE_KIND, "--storage", "-s", envvar=ENV_STORAGE, help="Backend (sqlite, directory, ram)"
    ),
    fresh: float = typer.Option(FRESH, "--fresh", envvar=ENV_FRESH, help="Freshness window in seconds"),
    never_expire: bool = typer.Option(False, "--never-expire", help="Disable the freshness window"),
    encoding: str = typer.Option(None, "--encoding", envvar=ENV_ENCODING, help="Codec applied to keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable info logging"),
) -> None:
    """Select the cache to operate on."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        ctx.obj = CacheConfig(
            storage_details=storage_details,
            storage=storage,
            fresh=None if never_expire else fresh,
            encoding=encoding,
        )
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]Error:[/red] {field}: {error['msg']}")
        raise typer.Exit(1)


@app.command("set")
def set_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to store"),
    value: str = typer.Argument(..., help="Value (stored as UTF-8)"),
    timestamp: str = typer.Option(None, "--timestamp", "-t", help="ISO 8601 write time"),
) -> None:
    """Store a value under a key."""
    written_at = None
    if timestamp:
        try:
            written_at = ensure_utc(datetime.fromisoformat(timestamp))
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid timestamp '{timestamp}'. Use ISO 8601.")
            raise typer.Exit(1)

    with _open_cache(ctx) as cache:
        try:
            cache.set(key, value.encode("utf-8"), written_at)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
    console.print(f"[green]Stored[/green] {key}")


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to read"),
) -> None:
    """Print the value for a key if it is still fresh (stale entries are evicted)."""
    with _open_cache(ctx) as cache:
        try:
            value = cache.get(key)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    if value is None:
        console.print(f"[yellow]No fresh value for '{key}'[/yellow]")
        raise typer.Exit(1)
    console.print(_decode(value), markup=False, highlight=False)


@app.command()
def delete(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to delete"),
) -> None:
    """Delete a key."""
    with _open_cache(ctx) as cache:
        try:
            cache.delete(key)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
    console.print(f"[green]Deleted[/green] {key}")


@app.command()
def age(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to inspect"),
) -> None:
    """Show when a key was written without evicting it."""
    with _open_cache(ctx) as cache:
        try:
            written_at = cache.timestamp_of(key)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        window = cache.freshness_seconds()

    if written_at is None:
        console.print(f"[yellow]'{key}' is not in the cache[/yellow]")
        raise typer.Exit(1)

    seconds = (_utc_now() - written_at).total_seconds()
    stale = window is not None and seconds > window
    status = "[red]stale[/red]" if stale else "[green]fresh[/green]"
    console.print(f"{key}: written {written_at.isoformat()} ({_format_age(seconds)} ago, {status})")


@app.command()
def keys(ctx: typer.Context) -> None:
    """List keys with their age and freshness (no eviction)."""
    rows = []
    with _open_cache(ctx) as cache:
        try:
            for k in cache.keys():
                entry = cache.storage.lookup(k)
                if entry is not None:
                    rows.append((k, entry, cache.is_stale(entry)))
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    if not rows:
        console.print("[yellow]Cache is empty.[/yellow]")
        return

    table = Table(title=f"Keys ({len(rows)})")
    table.add_column("Key", style="cyan")
    table.add_column("Written", style="dim")
    table.add_column("Age", justify="right", style="magenta")
    table.add_column("Status")

    for k, entry, stale in rows:
        table.add_row(
            _decode(k),
            entry.timestamp.isoformat(timespec="seconds"),
            _format_age(entry.age_seconds()),
            "[red]stale[/red]" if stale else "[green]fresh[/green]",
        )

    console.print(table)


@app.command()
def size(ctx: typer.Context) -> None:
    """Print the number of stored entries (stale ones included)."""
    with _open_cache(ctx) as cache:
        try:
            count = cache.size()
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
    console.print(str(count))


@app.command()
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every entry from the cache."""
    if not yes:
        typer.confirm(f"Remove all entries from {ctx.obj.storage_details}?", abort=True)

    with _open_cache(ctx) as cache:
        try:
            cache.clear()
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
    console.print("[green]Cache cleared[/green]")


@app.command()
def info(ctx: typer.Context) -> None:
    """Show the cache configuration and entry count."""
    config: CacheConfig = ctx.obj
    with _open_cache(ctx) as cache:
        try:
            count = cache.size()
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    table = Table(title="Cache")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Storage", config.storage.value)
    table.add_row("Location", config.storage_details)
    table.add_row("Freshness", "never expires" if config.fresh is None else f"{config.fresh:g}s")
    table.add_row("Key encoding", config.encoding or "-")
    table.add_row("Entries", str(count))
    console.print(table)


if __name__ == "__main__":
    app()
