"""
Stateful file handle over the Dropbox API.

DropboxHandle presents open/read/write/seek/tell/eof/close over a remote
store that only offers ranged GETs for reading and append-only chunked
uploads for writing.

Design Notes: Mode State Machine

A handle is always in exactly one of CLOSED, READING or WRITING. Stream
operations check the mode and raise InvalidModeError instead of switching.
Leaving WRITING, whether by close(), by reopening, or by a directory or file
operation, always runs the commit sequence first: the remote API permits a
single outstanding chunked upload per client context, so a pending upload
must be finalized before anything else is sent. abort() is the one way out
of WRITING that drops the upload instead.

Write path: bytes accumulate in an UploadBuffer and every full chunk is
appended to the upload session as soon as it is available. Commit appends
the remainder (or an empty chunk when nothing was ever appended, so empty
files still exist) and then finalizes the session.

Read path: a ReadWindow holds ``chunk_size`` bytes fetched with one ranged
GET. Reads inside the window are free; leaving it refetches from the
current position. readline() grows the window instead of replacing it so a
line spanning two fetches is not lost.

The handle is not thread-safe; share nothing between threads.
"""
from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Iterator, List, Optional

from .buffers import ReadWindow, UploadBuffer
from .errors import DirectoryError, InvalidModeError, NotFoundError, SeekError
from .metadata import Metadata
from .settings import Settings
from .storage.api import DropboxApi

__all__ = ["DropboxHandle", "Mode", "DIRECT_UPLOAD_LIMIT"]

logger = logging.getLogger(__name__)

# Largest payload files_put accepts; bigger payloads go through chunked upload
DIRECT_UPLOAD_LIMIT = 150 * 1024 * 1024

READ_MODES = ("r", "rb", "<")
WRITE_MODES = ("w", "wb", ">")


class Mode(str, Enum):
    """Handle states."""
    CLOSED = "closed"
    READING = "reading"
    WRITING = "writing"


class DropboxHandle:
    """
    File-handle style access to one remote file at a time.

    Example:
        >>> handle = DropboxHandle(settings)
        >>> with handle.open("/notes.txt", "w") as fh:
        ...     fh.write(b"hello\\n")
        >>> handle.open("/notes.txt").readline()
        b'hello\\n'
    """

    def __init__(
        self,
        settings: Settings,
        *,
        api: Optional[DropboxApi] = None,
        chunk_size: Optional[int] = None,
    ):
        """
        Initialize an empty, closed handle.

        Args:
            settings: Settings for the API client and default chunk size
            api: API client (defaults to one built from settings)
            chunk_size: Override of ``settings.chunk_size``

        Raises:
            ValueError: If chunk_size is not a positive integer
        """
        if chunk_size is None:
            chunk_size = settings.chunk_size
        if not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")

        self._settings = settings
        self.api = api if api is not None else DropboxApi(settings)
        self.chunk_size = chunk_size

        self._mode = Mode.CLOSED
        self._path: Optional[str] = None
        self._position = 0
        self._size: Optional[int] = None
        self._metadata: Optional[Metadata] = None
        self._window = ReadWindow()
        self._upload = UploadBuffer()

    # State accessors

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def closed(self) -> bool:
        return self._mode is Mode.CLOSED

    @property
    def metadata(self) -> Optional[Metadata]:
        """Last metadata record received by any operation, or None."""
        return self._metadata

    def get_metadata(self) -> Optional[Metadata]:
        return self._metadata

    def readable(self) -> bool:
        return self._mode is Mode.READING

    def writable(self) -> bool:
        return self._mode is Mode.WRITING

    def seekable(self) -> bool:
        return self._mode is Mode.READING

    def _require(self, mode: Mode, operation: str) -> None:
        if self._mode is not mode:
            raise InvalidModeError(
                f"{operation}() requires a handle open for {mode.value}, handle is {self._mode.value}"
            )

    # Mode state machine

    def open(self, path: str, mode: str = "r") -> DropboxHandle:
        """
        Bind the handle to ``path`` for reading or writing.

        A pending upload from a previous write session is committed first.
        Opening for write makes no remote call; the first full chunk or the
        final close does. Opening for read fetches metadata to validate the
        path.

        Args:
            path: Remote path
            mode: "r"/"rb"/"<" to read, "w"/"wb"/">" to write

        Returns:
            The handle itself, for use as a context manager

        Raises:
            ValueError: If mode is not recognized
            NotFoundError: If opened for read and the path does not exist
            DirectoryError: If opened for read and the path is a folder
            UploadError: If committing the previous upload fails
        """
        if mode in READ_MODES:
            target = Mode.READING
        elif mode in WRITE_MODES:
            target = Mode.WRITING
        else:
            raise ValueError(f"Unsupported mode: {mode!r}. Use one of {READ_MODES + WRITE_MODES}")

        self._finish_pending("open")
        self._reset()

        if target is Mode.READING:
            metadata = self.api.metadata(path)
            if metadata.is_deleted:
                raise NotFoundError(f"Not found: {path} (deleted)")
            if metadata.is_dir:
                raise DirectoryError(f"Is a directory: {path}")
            self._metadata = metadata
            self._size = metadata.bytes

        self._path = path
        self._mode = target
        logger.debug(f"Opened {path} for {target.value}")
        return self

    def close(self) -> bool:
        """
        Close the handle, committing any write session.

        Closing an already closed handle is a no-op.

        Raises:
            UploadError: If the commit fails; the handle stays open for writing
                so close() can be retried
        """
        if self._mode is Mode.WRITING:
            self._commit()
        if self._mode is not Mode.CLOSED:
            logger.debug(f"Closed {self._path}")
        self._reset()
        return True

    def abort(self) -> None:
        """
        Close the handle without committing.

        Pending bytes and the upload session are dropped, so the remote
        file keeps its previous content. The server expires the abandoned
        session on its own.
        """
        if self._mode is Mode.WRITING:
            logger.debug(f"Discarding upload {self._upload.upload_id} to {self._path}")
        self._reset()

    def _finish_pending(self, reason: str) -> None:
        """Commit a pending write session and leave the handle closed."""
        if self._mode is Mode.WRITING:
            logger.debug(f"Auto-committing upload to {self._path} before {reason}")
            self._commit()
            self._reset()

    def _reset(self) -> None:
        self._mode = Mode.CLOSED
        self._path = None
        self._position = 0
        self._size = None
        self._window.clear()
        self._upload.reset()

    # Write engine

    def write(self, data: bytes) -> int:
        """
        Buffer ``data`` and append every full chunk to the upload session.

        Returns:
            Number of bytes accepted, always ``len(data)``

        Raises:
            InvalidModeError: If the handle is not open for writing
            TypeError: If data is not bytes-like
            UploadError: If appending a chunk fails. ``data`` is already in
                the buffer at that point: retry with ``close()`` or the next
                ``write()``, never by writing the same bytes again.
        """
        self._require(Mode.WRITING, "write")
        if isinstance(data, str):
            raise TypeError("write() argument must be bytes-like, not str")
        data = memoryview(data).tobytes()

        self._upload.append(data)
        self._position += len(data)

        while len(self._upload) >= self.chunk_size:
            self._append(self._upload.peek(self.chunk_size))

        return len(data)

    def _append(self, chunk: bytes) -> None:
        upload = self._upload
        session = self.api.chunked_upload(chunk, upload_id=upload.upload_id, offset=upload.offset)
        upload.accept(len(chunk), session.upload_id)
        if session.offset != upload.offset:
            logger.warning(
                f"Server reports offset {session.offset} for upload {session.upload_id}, "
                f"expected {upload.offset}"
            )
        logger.debug(f"Appended {len(chunk)} bytes to upload {upload.upload_id}, offset now {upload.offset}")

    def _commit(self) -> None:
        upload = self._upload
        if len(upload) or not upload.started:
            self._append(upload.peek(len(upload)))

        metadata = self.api.commit_chunked_upload(self._path, upload.upload_id)
        self._metadata = metadata
        logger.debug(f"Committed upload {upload.upload_id} to {metadata.path} ({metadata.bytes} bytes)")
        upload.reset()

    # Read engine

    def _fetch(self, position: int) -> None:
        """Replace the window with ``chunk_size`` bytes starting at ``position``."""
        data = self.api.download_range(self._path, position, self.chunk_size)
        self._window.replace(position, data, eof=len(data) < self.chunk_size)

    def _extend(self) -> None:
        """Grow the window by one fetch starting at its end."""
        data = self.api.download_range(self._path, self._window.end, self.chunk_size)
        self._window.extend(data, eof=len(data) < self.chunk_size)

    def _ensure_buffered(self, position: int, size: int) -> None:
        """Fetch a window at ``position`` unless ``size`` bytes (or the rest of the file) are buffered."""
        window = self._window
        if window.available(position) >= size:
            return
        if window.covers(position) and window.eof:
            return
        self._fetch(position)

    def read(self, size: Optional[int] = -1) -> bytes:
        """
        Read up to ``size`` bytes from the current position.

        Returns fewer bytes only at end of stream. ``-1`` or None reads
        everything that remains.

        Raises:
            InvalidModeError: If the handle is not open for reading
            DownloadError: If a ranged fetch fails; already buffered bytes stay readable
        """
        self._require(Mode.READING, "read")
        if size is None or size < 0:
            return self._read_all()

        start = self._position
        chunks = []
        remaining = size
        try:
            while remaining > 0:
                # Drain the current window before fetching the next one
                self._ensure_buffered(self._position, 1)
                piece = self._window.slice(self._position, remaining)
                if not piece:
                    break
                chunks.append(piece)
                self._position += len(piece)
                remaining -= len(piece)
        except Exception:
            # Nothing was returned, so nothing is consumed
            self._position = start
            raise

        return b"".join(chunks)

    def _read_all(self) -> bytes:
        start = self._position
        chunks = []
        try:
            while True:
                piece = self.read(self.chunk_size)
                if not piece:
                    break
                chunks.append(piece)
        except Exception:
            self._position = start
            raise
        return b"".join(chunks)

    def getc(self) -> bytes:
        """Read a single byte; ``b""`` at end of stream."""
        return self.read(1)

    def readline(self) -> bytes:
        """
        Read one line including its terminator.

        At end of stream returns the unterminated final fragment, then ``b""``.
        """
        self._require(Mode.READING, "readline")
        self._ensure_buffered(self._position, 1)

        window = self._window
        while True:
            index = window.find(b"\n", self._position)
            if index >= 0:
                end = index + 1
                break
            if window.eof:
                end = window.end
                break
            self._extend()

        line = window.slice(self._position, end - self._position)
        self._position += len(line)
        return line

    def readlines(self) -> List[bytes]:
        return list(self)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            line = self.readline()
            if not line:
                return
            yield line

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """
        Move the read position. No fetch happens until the next read.

        SEEK_END is relative to the size recorded when the file was opened,
        whatever metadata later operations have cached since.

        Returns:
            The new absolute position

        Raises:
            InvalidModeError: If the handle is not open for reading
            SeekError: If SEEK_END is used without a known size, or the
                target is negative
            ValueError: If whence is not SEEK_SET, SEEK_CUR or SEEK_END
        """
        self._require(Mode.READING, "seek")

        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._position + offset
        elif whence == os.SEEK_END:
            if self._size is None:
                raise SeekError(f"Cannot seek relative to end of {self._path}: size unknown")
            target = self._size + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")

        if target < 0:
            raise SeekError(f"Negative seek position {target} in {self._path}")

        self._position = target
        return target

    def tell(self) -> int:
        self._require(Mode.READING, "tell")
        return self._position

    def eof(self) -> bool:
        """True once the position is past the last byte of a short fetch."""
        self._require(Mode.READING, "eof")
        return self._position >= self._window.end and self._window.eof

    # Directory and file operations

    def contents(self, path: str) -> List[Metadata]:
        """
        List the children of a folder.

        The folder's own metadata replaces the cached record.
        """
        self._finish_pending("contents")
        metadata = self.api.metadata(path, list_contents=True)
        self._metadata = metadata
        return list(metadata.contents)

    def putfile(self, path: str, data: bytes) -> Metadata:
        """
        Upload ``data`` as the whole content of ``path``.

        Uses one direct upload request when the payload fits, otherwise a
        chunked upload that does not touch this handle's own write session.
        """
        self._finish_pending("putfile")
        data = memoryview(data).tobytes()

        if len(data) <= DIRECT_UPLOAD_LIMIT:
            metadata = self.api.files_put(path, data)
        else:
            upload_id = None
            offset = 0
            while offset < len(data):
                chunk = data[offset:offset + self.chunk_size]
                session = self.api.chunked_upload(chunk, upload_id=upload_id, offset=offset)
                upload_id = session.upload_id
                offset += len(chunk)
            metadata = self.api.commit_chunked_upload(path, upload_id)

        self._metadata = metadata
        return metadata

    def copyfile(self, from_path: str, to_path: str) -> Metadata:
        self._finish_pending("copyfile")
        self._metadata = self.api.copy(from_path, to_path)
        return self._metadata

    def movefile(self, from_path: str, to_path: str) -> Metadata:
        self._finish_pending("movefile")
        self._metadata = self.api.move(from_path, to_path)
        return self._metadata

    def deletefile(self, path: str) -> Metadata:
        self._finish_pending("deletefile")
        self._metadata = self.api.delete(path)
        return self._metadata

    def createfolder(self, path: str) -> Metadata:
        self._finish_pending("createfolder")
        self._metadata = self.api.create_folder(path)
        return self._metadata

    # Context manager

    def __enter__(self) -> DropboxHandle:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<DropboxHandle mode={self._mode.value} path={self._path!r} chunk_size={self.chunk_size}>"
