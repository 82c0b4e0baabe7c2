"""
Data models for Dropbox API responses.

These Pydantic models decode the JSON bodies returned by the metadata,
upload and file operation endpoints. Unknown fields are kept verbatim so
callers see the record exactly as the server sent it.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ApiError

__all__ = ["Metadata", "UploadSession", "parse_metadata", "parse_upload_session"]


class Metadata(BaseModel):
    """Metadata record for a file or folder."""
    model_config = ConfigDict(extra="allow")

    path: str = Field(..., description="Path relative to the access root")
    bytes: int = Field(default=0, description="Size in bytes")
    is_dir: bool = Field(default=False, description="True for folders")
    rev: Optional[str] = Field(default=None, description="Revision identifier")
    revision: Optional[int] = Field(default=None, description="Legacy numeric revision")
    modified: Optional[str] = Field(default=None, description="Last modification time")
    size: Optional[str] = Field(default=None, description="Human-readable size")
    is_deleted: bool = Field(default=False, description="True if the entry was deleted")
    mime_type: Optional[str] = Field(default=None, description="Guessed MIME type")
    root: Optional[str] = Field(default=None, description="Access root the path lives in")
    contents: List[Metadata] = Field(default_factory=list, description="Folder children")


class UploadSession(BaseModel):
    """State of a chunked upload as reported by the server."""
    model_config = ConfigDict(extra="allow")

    upload_id: str
    offset: int
    expires: Optional[str] = None


def parse_metadata(body: bytes) -> Metadata:
    """
    Decode a metadata response body.

    Raises:
        ApiError: If the body is not a valid metadata record
    """
    try:
        return Metadata.model_validate_json(body)
    except ValidationError as e:
        raise ApiError(f"Invalid metadata response: {e}") from e


def parse_upload_session(body: bytes) -> UploadSession:
    """Decode a chunked_upload response body."""
    try:
        return UploadSession.model_validate_json(body)
    except ValidationError as e:
        raise ApiError(f"Invalid chunked upload response: {e}") from e
