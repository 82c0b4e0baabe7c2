"""
dropbox-handle CLI

Implements file verbs on top of the Operations facade:
- cat: Stream a remote file to stdout
- get: Download a remote file
- put: Upload a local file through chunked upload
- ls: List a folder
- stat: Show metadata for a file or folder
- cp / mv / rm / mkdir: File operations
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer

from .cli_context import CLIContext
from .operations import Operations, run_and_exit
from .operations.printers import print_listing, print_metadata, print_transfer_summary

T = TypeVar("T")

app = typer.Typer(name="dropbox-handle", help="Dropbox file handle CLI")

ChunkSizeOption = typer.Option(
    None, "--chunk-size", envvar="DROPBOX_CHUNK_SIZE", min=1,
    help="Upload chunk and read prefetch size in bytes",
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log remote calls to stderr")) -> None:
    """Dropbox file handle CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _run(chunk_size: Optional[int], func: Callable[[Operations], T]) -> T:
    """Run ``func`` with an Operations facade, closing the handle afterwards."""
    def _call() -> T:
        context = CLIContext.from_env(chunk_size=chunk_size)
        try:
            return func(Operations(context.handle))
        finally:
            context.close()

    return run_and_exit(_call)


@app.command()
def cat(
    path: str = typer.Argument(..., help="Remote file path"),
    chunk_size: Optional[int] = ChunkSizeOption,
) -> None:
    """Stream a remote file to stdout."""
    stdout = typer.get_binary_stream("stdout")
    _run(chunk_size, lambda ops: ops.cat(path, stdout))
    stdout.flush()


@app.command()
def get(
    path: str = typer.Argument(..., help="Remote file path"),
    dest: Path = typer.Argument(..., help="Local destination file"),
    chunk_size: Optional[int] = ChunkSizeOption,
) -> None:
    """Download a remote file."""
    metadata = _run(chunk_size, lambda ops: ops.get(path, dest))
    print_transfer_summary("Downloaded", path, str(dest), metadata)


@app.command()
def put(
    src: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Local source file"),
    path: str = typer.Argument(..., help="Remote destination path"),
    chunk_size: Optional[int] = ChunkSizeOption,
) -> None:
    """Upload a local file."""
    metadata = _run(chunk_size, lambda ops: ops.put(src, path))
    print_transfer_summary("Uploaded", str(src), metadata.path, metadata)


@app.command()
def ls(path: str = typer.Argument("/", help="Remote folder path")) -> None:
    """List a folder."""
    entries = _run(None, lambda ops: ops.ls(path))
    print_listing(path, entries)


@app.command()
def stat(path: str = typer.Argument(..., help="Remote path")) -> None:
    """Show metadata for a file or folder."""
    print_metadata(_run(None, lambda ops: ops.stat(path)))


@app.command()
def cp(
    src: str = typer.Argument(..., help="Remote source path"),
    dst: str = typer.Argument(..., help="Remote destination path"),
) -> None:
    """Copy a remote file or folder."""
    metadata = _run(None, lambda ops: ops.cp(src, dst))
    print_transfer_summary("Copied", src, metadata.path, metadata)


@app.command()
def mv(
    src: str = typer.Argument(..., help="Remote source path"),
    dst: str = typer.Argument(..., help="Remote destination path"),
) -> None:
    """Move a remote file or folder."""
    metadata = _run(None, lambda ops: ops.mv(src, dst))
    print_transfer_summary("Moved", src, metadata.path, metadata)


@app.command()
def rm(path: str = typer.Argument(..., help="Remote path")) -> None:
    """Delete a remote file or folder."""
    metadata = _run(None, lambda ops: ops.rm(path))
    typer.echo(f"Deleted {metadata.path}")


@app.command()
def mkdir(path: str = typer.Argument(..., help="Remote folder path")) -> None:
    """Create a remote folder."""
    metadata = _run(None, lambda ops: ops.mkdir(path))
    typer.echo(f"Created {metadata.path}")


if __name__ == "__main__":
    app()
