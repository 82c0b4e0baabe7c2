"""
dropbox-handle: POSIX-style file handles over the Dropbox API.

Reads are served from a ranged-GET prefetch window, writes are buffered and
sent as chunked uploads committed on close.
"""
from .errors import (
    ApiError,
    DirectoryError,
    DownloadError,
    DropboxHandleError,
    InvalidModeError,
    NotFoundError,
    SeekError,
    TransportError,
    UploadError,
)
from .handle import DropboxHandle, Mode
from .metadata import Metadata
from .settings import Settings, create_settings_from_env

__all__ = [
    "DropboxHandle",
    "Mode",
    "Metadata",
    "Settings",
    "create_settings_from_env",
    "DropboxHandleError",
    "InvalidModeError",
    "NotFoundError",
    "DirectoryError",
    "UploadError",
    "DownloadError",
    "ApiError",
    "SeekError",
    "TransportError",
]
