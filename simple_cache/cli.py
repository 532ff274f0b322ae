"""CLI interface for simple_cache."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from simple_cache.engine import SimpleCache, open_cache
from simple_cache.models.model_cache import CacheEntryMetadata

app = typer.Typer(
    name="simple-cache",
    help="simple-cache - Store, inspect and evict cached objects",
)

console = Console()

T = TypeVar("T")

NamespaceOption = typer.Option("default", "--namespace", "-n", help="Cache namespace")
RootOption = typer.Option(None, "--root", help="Storage root directory (default: system temp dir)")
VirtualOption = typer.Option(False, "--virtual", help="Use the in-memory store (nothing is persisted)")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _run(
    namespace: str,
    root: Path | None,
    virtual: bool,
    action: Callable[[SimpleCache], Awaitable[T]],
) -> T:
    """Open the namespace, run one action, then flush and close."""

    async def runner() -> T:
        cache = await open_cache(
            namespace,
            storage_root=root,
            virtual=True if virtual else None,
        )
        try:
            return await action(cache)
        finally:
            await cache.close()

    try:
        return asyncio.run(runner())
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _format_time(value: datetime | None) -> str:
    if value is None:
        return "never"
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S")


def _status(entry: CacheEntryMetadata, now: datetime) -> str:
    if entry.is_expired(now):
        return "[red]expired[/red]"
    return "[green]active[/green]"


@app.command()
def put(
    cache_id: str = typer.Argument(..., help="Cache id (may contain '/')"),
    text: str = typer.Option(None, "--text", "-t", help="Text to store"),
    file: Path = typer.Option(None, "--file", "-f", help="File whose bytes to store"),
    ttl: float = typer.Option(None, "--ttl", help="Time-to-live in seconds"),
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Store text or a file's bytes under an id."""
    _configure_logging(verbose)

    if (text is None) == (file is None):
        console.print("[red]Error:[/red] Provide exactly one of --text or --file")
        raise typer.Exit(1)

    if file is not None:
        try:
            data = file.read_bytes()
        except OSError as e:
            console.print(f"[red]Error:[/red] Cannot read {file}: {e}")
            raise typer.Exit(1)
    else:
        data = text.encode("utf-8")

    _run(namespace, root, virtual, lambda cache: cache.write_bytes(cache_id, data, ttl=ttl))
    ttl_str = f" (ttl={ttl:g}s)" if ttl is not None else ""
    console.print(f"[green]Stored[/green] {cache_id}: {len(data)} bytes{ttl_str}")


@app.command()
def get(
    cache_id: str = typer.Argument(..., help="Cache id"),
    output: Path = typer.Option(None, "--output", "-o", help="Write bytes to this file"),
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Print (or save) a cached object."""
    _configure_logging(verbose)

    obj = _run(namespace, root, virtual, lambda cache: cache.get(cache_id))
    if obj is None:
        console.print(f"[yellow]Miss:[/yellow] {cache_id}")
        raise typer.Exit(1)

    if output is not None:
        output.write_bytes(obj.data)
        console.print(f"Wrote {len(obj.data)} bytes to {output}")
        return

    try:
        console.print(obj.text, markup=False, highlight=False)
    except UnicodeDecodeError:
        console.print(f"<{len(obj.data)} bytes of binary data; use --output>")


@app.command("rm")
def remove(
    cache_id: str = typer.Argument(..., help="Cache id"),
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove a cached object."""
    _configure_logging(verbose)

    removed = _run(namespace, root, virtual, lambda cache: cache.remove(cache_id))
    if removed:
        console.print(f"[green]Removed[/green] {cache_id}")
    else:
        console.print(f"[yellow]Not cached:[/yellow] {cache_id}")


@app.command("ls")
def list_entries(
    include_expired: bool = typer.Option(True, "--include-expired/--active-only", help="Show expired entries"),
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """List cached ids with their timestamps."""
    _configure_logging(verbose)

    entries = _run(
        namespace,
        root,
        virtual,
        lambda cache: cache.list_entries(include_expired=include_expired),
    )
    if not entries:
        console.print("[yellow]Cache is empty.[/yellow]")
        return

    now = datetime.now(UTC)
    table = Table(title=f"Namespace '{namespace}' ({len(entries)} entries)")
    table.add_column("Id", style="cyan")
    table.add_column("Created", style="dim")
    table.add_column("Expires", style="dim")
    table.add_column("Status")

    for entry in entries:
        table.add_row(entry.id, _format_time(entry.created), _format_time(entry.expires), _status(entry, now))

    console.print(table)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove every object in the namespace."""
    _configure_logging(verbose)

    if not yes and not typer.confirm(f"Clear all cached objects in '{namespace}'?"):
        raise typer.Exit(1)

    deleted = _run(namespace, root, virtual, lambda cache: cache.clear())
    console.print(f"[green]Cleared[/green] {deleted} objects from '{namespace}'")


@app.command()
def evict(
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove expired objects."""
    _configure_logging(verbose)

    evicted = _run(namespace, root, virtual, lambda cache: cache.evict_expired_objects())
    console.print(f"Evicted {evicted} expired objects from '{namespace}'")


@app.command()
def stats(
    namespace: str = NamespaceOption,
    root: Path = RootOption,
    virtual: bool = VirtualOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show cache statistics."""
    _configure_logging(verbose)

    data = _run(namespace, root, virtual, lambda cache: cache.stats())

    table = Table(title="Cache Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")
    for key, value in data.items():
        table.add_row(key.replace("_", " ").title(), str(value))

    console.print(table)


if __name__ == "__main__":
    app()
