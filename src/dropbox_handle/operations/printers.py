"""
Human-readable output formatting.

Centralizes all CLI output formatting to keep CLI commands thin and focused.
"""
from __future__ import annotations

from typing import List

from rich.console import Console
from rich.table import Table

from ..metadata import Metadata

_console = Console()
_err_console = Console(stderr=True)


def print_metadata(metadata: Metadata) -> None:
    """Print a single metadata record."""
    kind = "folder" if metadata.is_dir else "file"
    _console.print(f"[bold]Path:[/] {metadata.path}")
    _console.print(f"[bold]Type:[/] {kind}")
    if not metadata.is_dir:
        _console.print(f"[bold]Size:[/] {_format_bytes(metadata.bytes)}")
    if metadata.rev:
        _console.print(f"[bold]Revision:[/] {metadata.rev}")
    if metadata.modified:
        _console.print(f"[bold]Modified:[/] {metadata.modified}")
    if metadata.is_deleted:
        _console.print("[bold]Deleted:[/] yes")


def print_listing(path: str, entries: List[Metadata]) -> None:
    """Print folder children as a table."""
    if not entries:
        _console.print(f"[dim]{path} is empty[/]")
        return

    table = Table(title=path)
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right", style="yellow")
    table.add_column("Modified")

    for entry in sorted(entries, key=lambda e: (not e.is_dir, e.path.lower())):
        name = entry.path.rsplit("/", 1)[-1] + ("/" if entry.is_dir else "")
        size = "-" if entry.is_dir else _format_bytes(entry.bytes)
        table.add_row(name, size, entry.modified or "")

    _console.print(table)


def print_transfer_summary(verb: str, source: str, target: str, metadata: Metadata) -> None:
    """Print result of an upload, download, copy or move."""
    _console.print(f"{verb} {source} -> {target} ({_format_bytes(metadata.bytes)})")


def print_error(exc: BaseException) -> None:
    _err_console.print(f"[red]Error:[/] {exc}")


def _format_bytes(size: int) -> str:
    """Format byte count in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}" if unit != 'B' else f"{size} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
