"""
Dropbox Core API client.

One method per endpoint, each a single request/response over a Transport.
Maps HTTP statuses to the dropbox-handle error taxonomy and decodes
response bodies into metadata records.
"""
from __future__ import annotations

import json
import logging
from typing import Mapping, Optional, Type
from urllib.parse import quote

from ..errors import (
    ApiError,
    DownloadError,
    NotFoundError,
    RemoteError,
    TransportError,
    UploadError,
)
from ..metadata import Metadata, UploadSession, parse_metadata, parse_upload_session
from ..settings import Settings
from .base import Transport, TransportResponse

__all__ = ["DropboxApi", "normalize_path"]

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """
    Normalize a remote path to the form the API expects.

    Collapses repeated slashes, strips a trailing slash and guarantees a
    single leading slash. The access root itself is "/".

    Raises:
        ValueError: If path is empty or contains backslashes
    """
    if not path:
        raise ValueError("Path cannot be empty")
    if "\\" in path:
        raise ValueError(f"Path contains backslashes (use forward slashes): {path}")

    parts = [part for part in path.split("/") if part]
    return "/" + "/".join(parts)


def _error_message(response: TransportResponse) -> Optional[str]:
    """Extract the server error message from a Dropbox error body."""
    try:
        payload = json.loads(response.body)
    except (ValueError, UnicodeDecodeError):
        text = response.body.decode("utf-8", errors="replace").strip()
        return text or None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return "; ".join(f"{key}: {value}" for key, value in error.items())
        if error is not None:
            return str(error)
    return None


class DropboxApi:
    """
    Thin client for the Dropbox Core API v1 endpoints used by the handle.

    The client holds no per-file state; every call is independent.
    """

    def __init__(self, settings: Settings, transport: Optional[Transport] = None):
        """
        Initialize API client.

        Args:
            settings: Settings with root, endpoint URLs and credentials
            transport: Transport to send requests through (defaults to HttpTransport)
        """
        self._settings = settings
        if transport is None:
            from .http_transport import HttpTransport
            transport = HttpTransport(settings)
        self.transport = transport

    @property
    def root(self) -> str:
        return self._settings.root

    def _url(self, base: str, endpoint: str, path: Optional[str] = None) -> str:
        url = f"{base.rstrip('/')}/{endpoint}"
        if path is not None:
            url += f"/{self.root}{quote(path, safe='/')}"
        return url

    def _call(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        path: Optional[str] = None,
        offset: Optional[int] = None,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """Send one request, annotating transport failures with context."""
        logger.debug(f"{operation}: {method} {url} path={path} offset={offset}")
        try:
            return self.transport.signed_request(
                method, url, params=params, content=content, headers=headers
            )
        except TransportError as e:
            e.operation = operation
            e.path = path
            e.offset = offset
            raise

    def _raise_for_status(
        self,
        response: TransportResponse,
        operation: str,
        target: str,
        error_class: Type[RemoteError],
    ) -> None:
        if response.ok:
            return

        message = _error_message(response)
        # Upload endpoints answer 404 for an unknown or expired upload_id
        if response.status == 404 and error_class is not UploadError:
            raise NotFoundError(f"Not found: {target}" + (f" ({message})" if message else ""))

        detail = f"{operation} failed for {target}: HTTP {response.status}"
        if message:
            detail += f": {message}"
        raise error_class(detail, status=response.status, remote_message=message)

    def metadata(self, path: str, *, list_contents: bool = False) -> Metadata:
        """
        Fetch metadata for a file or folder.

        Args:
            path: Remote path
            list_contents: Include folder children in ``contents``

        Raises:
            NotFoundError: If path does not exist
            ApiError: For other remote failures
        """
        path = normalize_path(path)
        response = self._call(
            "metadata",
            "GET",
            self._url(self._settings.api_url, "metadata", path),
            path=path,
            params={"list": "true" if list_contents else "false"},
        )
        self._raise_for_status(response, "metadata", path, ApiError)
        return parse_metadata(response.body)

    def download_range(self, path: str, start: int, length: int) -> bytes:
        """
        Fetch the byte range ``[start, start + length)`` of a file.

        Returns fewer than ``length`` bytes when the range runs past the end
        of the file, and ``b""`` when it starts at or beyond the end.

        Raises:
            NotFoundError: If path does not exist
            DownloadError: For other remote failures
        """
        if start < 0 or length <= 0:
            raise ValueError(f"Invalid range: start={start} length={length}")

        path = normalize_path(path)
        response = self._call(
            "download",
            "GET",
            self._url(self._settings.content_url, "files", path),
            path=path,
            offset=start,
            headers={"Range": f"bytes={start}-{start + length - 1}"},
        )

        # Range Not Satisfiable: the range starts at or past end of file
        if response.status == 416:
            return b""

        self._raise_for_status(response, "download", path, DownloadError)

        if response.status == 200:
            # Server ignored the Range header and sent the whole file
            return response.body[start:start + length]
        return response.body[:length]

    def chunked_upload(
        self,
        data: bytes,
        *,
        upload_id: Optional[str] = None,
        offset: int = 0,
    ) -> UploadSession:
        """
        Append one chunk to an upload session.

        Args:
            data: Chunk bytes (may be empty)
            upload_id: Existing session id, or None to start a new session
            offset: Bytes already accepted for the session

        Raises:
            UploadError: If the server rejects the chunk, including an
                unknown or expired ``upload_id``
        """
        params = {"offset": str(offset)}
        if upload_id is not None:
            params["upload_id"] = upload_id

        response = self._call(
            "chunked_upload",
            "PUT",
            self._url(self._settings.content_url, "chunked_upload"),
            offset=offset,
            params=params,
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        self._raise_for_status(response, "chunked_upload", upload_id or "new session", UploadError)
        return parse_upload_session(response.body)

    def commit_chunked_upload(self, path: str, upload_id: str, *, overwrite: bool = True) -> Metadata:
        """
        Finalize an upload session into a file at ``path``.

        Raises:
            UploadError: If the commit is rejected
        """
        path = normalize_path(path)
        response = self._call(
            "commit_chunked_upload",
            "POST",
            self._url(self._settings.content_url, "commit_chunked_upload", path),
            path=path,
            params={"upload_id": upload_id, "overwrite": "true" if overwrite else "false"},
        )
        self._raise_for_status(response, "commit_chunked_upload", path, UploadError)
        return parse_metadata(response.body)

    def files_put(self, path: str, data: bytes, *, overwrite: bool = True) -> Metadata:
        """
        Upload a whole file in one request.

        Raises:
            UploadError: If the upload is rejected
        """
        path = normalize_path(path)
        response = self._call(
            "files_put",
            "PUT",
            self._url(self._settings.content_url, "files_put", path),
            path=path,
            params={"overwrite": "true" if overwrite else "false"},
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        self._raise_for_status(response, "files_put", path, UploadError)
        return parse_metadata(response.body)

    def _fileop(self, operation: str, target: str, params: Mapping[str, str]) -> Metadata:
        response = self._call(
            operation,
            "POST",
            self._url(self._settings.api_url, f"fileops/{operation}"),
            path=target,
            params={"root": self.root, **params},
        )
        self._raise_for_status(response, operation, target, ApiError)
        return parse_metadata(response.body)

    def copy(self, from_path: str, to_path: str) -> Metadata:
        """Copy a file or folder; returns metadata of the copy."""
        from_path, to_path = normalize_path(from_path), normalize_path(to_path)
        return self._fileop("copy", from_path, {"from_path": from_path, "to_path": to_path})

    def move(self, from_path: str, to_path: str) -> Metadata:
        """Move a file or folder; returns metadata at the new location."""
        from_path, to_path = normalize_path(from_path), normalize_path(to_path)
        return self._fileop("move", from_path, {"from_path": from_path, "to_path": to_path})

    def delete(self, path: str) -> Metadata:
        """Delete a file or folder; returns metadata flagged ``is_deleted``."""
        path = normalize_path(path)
        return self._fileop("delete", path, {"path": path})

    def create_folder(self, path: str) -> Metadata:
        """Create a folder; returns its metadata."""
        path = normalize_path(path)
        return self._fileop("create_folder", path, {"path": path})

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
