"""
Dropbox handle error classes.

Provides a clear taxonomy of errors that can occur while driving a handle.
Remote failures are mapped from HTTP status codes and transport exceptions
so callers see the same hierarchy regardless of which request failed.
"""
from __future__ import annotations

from typing import Optional


class DropboxHandleError(Exception):
    """Base class for all dropbox-handle errors."""
    pass


class InvalidModeError(DropboxHandleError):
    """
    Operation attempted in the wrong mode.

    Raised when:
    - read/seek/tell/eof is called while writing
    - write is called while reading
    - any stream operation is called before open
    """
    pass


class NotFoundError(DropboxHandleError):
    """
    Remote path does not exist.

    Raised when:
    - HTTP 404 Not Found from metadata, files or fileops endpoints
    - metadata for the path is flagged as deleted
    """
    pass


class DirectoryError(DropboxHandleError):
    """Raised when a directory is opened as a file."""
    pass


class RemoteError(DropboxHandleError):
    """
    Remote store answered with a non-success status.

    Carries the HTTP status and the server-provided error message.
    """

    def __init__(self, message: str, status: Optional[int] = None, remote_message: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.remote_message = remote_message


class UploadError(RemoteError):
    """
    Chunk append, commit or direct upload failed.

    Write buffer and upload session are left unchanged, so the same
    flush can be reattempted.
    """
    pass


class DownloadError(RemoteError):
    """
    Ranged GET failed.

    The read window is left at its last good state.
    """
    pass


class ApiError(RemoteError):
    """Metadata or file operation failed, or its response could not be decoded."""
    pass


class SeekError(DropboxHandleError):
    """
    Seek target cannot be computed.

    Raised when:
    - SEEK_END is requested but the file size is unknown
    - the resulting offset is negative
    """
    pass


class TransportError(DropboxHandleError):
    """
    Network or timeout failure below the HTTP status level.

    The API layer annotates it with the operation, path and offset in
    flight so upload-phase and download-phase failures can be told apart.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.path = path
        self.offset = offset

    def __str__(self) -> str:
        message = super().__str__()
        context = [
            f"{name}={value}"
            for name, value in (("operation", self.operation), ("path", self.path), ("offset", self.offset))
            if value is not None
        ]
        if context:
            return f"{message} ({', '.join(context)})"
        return message


__all__ = [
    "DropboxHandleError",
    "InvalidModeError",
    "NotFoundError",
    "DirectoryError",
    "RemoteError",
    "UploadError",
    "DownloadError",
    "ApiError",
    "SeekError",
    "TransportError",
]
