"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and the handle, centralizing
command orchestration while keeping CLI commands thin and testable.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, List

from ..handle import DropboxHandle
from ..metadata import Metadata

logger = logging.getLogger(__name__)


class Operations:
    """
    Application service facade for CLI operations.

    One method per CLI verb. Exceptions bubble up unchanged for central
    mapping to exit codes. Every transfer goes through the single injected
    handle, so its auto-commit rules apply across commands.
    """

    def __init__(self, handle: DropboxHandle):
        self.handle = handle

    def cat(self, path: str, out: BinaryIO) -> int:
        """Stream a remote file to ``out``; returns bytes copied."""
        handle = self.handle.open(path, "r")
        try:
            total = 0
            while True:
                chunk = handle.read(handle.chunk_size)
                if not chunk:
                    break
                out.write(chunk)
                total += len(chunk)
            return total
        finally:
            handle.close()

    def get(self, path: str, dest: Path) -> Metadata:
        """Download a remote file to a local path."""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with open(dest, "wb") as out:
            size = self.cat(path, out)
        logger.debug(f"Downloaded {path} to {dest} ({size} bytes)")
        return self.handle.metadata

    def put(self, src: Path, path: str) -> Metadata:
        """Upload a local file through the handle's chunked write path."""
        with open(src, "rb") as source:
            return self.upload(source, path)

    def upload(self, source: BinaryIO, path: str) -> Metadata:
        """
        Stream ``source`` into ``path`` and commit.

        If reading the source or appending a chunk fails, the upload is
        discarded and the remote file keeps its previous content.
        """
        handle = self.handle.open(path, "w")
        try:
            shutil.copyfileobj(source, handle, handle.chunk_size)
        except Exception:
            handle.abort()
            raise
        handle.close()
        return handle.metadata

    def ls(self, path: str) -> List[Metadata]:
        return self.handle.contents(path)

    def stat(self, path: str) -> Metadata:
        self.handle.contents(path)
        return self.handle.metadata

    def cp(self, src: str, dst: str) -> Metadata:
        return self.handle.copyfile(src, dst)

    def mv(self, src: str, dst: str) -> Metadata:
        return self.handle.movefile(src, dst)

    def rm(self, path: str) -> Metadata:
        return self.handle.deletefile(path)

    def mkdir(self, path: str) -> Metadata:
        return self.handle.createfolder(path)
