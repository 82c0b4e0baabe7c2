"""
Read and write buffers owned by a DropboxHandle.

ReadWindow holds a prefetched slice of the remote file. UploadBuffer holds
bytes written but not yet appended to the remote upload session, along with
the session identity. The two are independent; a handle uses at most one of
them at a time.
"""
from __future__ import annotations

from typing import Optional

__all__ = ["ReadWindow", "UploadBuffer"]


class ReadWindow:
    """
    Prefetched bytes ``[start, end)`` of a remote file.

    ``eof`` records that the fetch which produced the tail of the window
    returned fewer bytes than requested.
    """

    def __init__(self) -> None:
        self.data = bytearray()
        self.start = 0
        self.eof = False

    @property
    def end(self) -> int:
        return self.start + len(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def covers(self, position: int) -> bool:
        """True if ``position`` lies within ``[start, end]``."""
        return self.start <= position <= self.end

    def available(self, position: int) -> int:
        """Bytes readable from ``position`` without a fetch."""
        if not self.covers(position):
            return 0
        return self.end - position

    def slice(self, position: int, size: int) -> bytes:
        offset = position - self.start
        return bytes(self.data[offset:offset + size])

    def find(self, needle: bytes, position: int) -> int:
        """Absolute offset of ``needle`` at or after ``position``, or -1."""
        index = self.data.find(needle, position - self.start)
        return -1 if index < 0 else self.start + index

    def replace(self, start: int, data: bytes, eof: bool) -> None:
        self.data = bytearray(data)
        self.start = start
        self.eof = eof

    def extend(self, data: bytes, eof: bool) -> None:
        self.data.extend(data)
        self.eof = eof

    def clear(self) -> None:
        self.replace(0, b"", False)


class UploadBuffer:
    """
    Pending bytes of one chunked upload.

    ``offset`` is the number of bytes the server has accepted for
    ``upload_id``; it only grows within a session.
    """

    def __init__(self) -> None:
        self.data = bytearray()
        self.upload_id: Optional[str] = None
        self.offset = 0

    def __len__(self) -> int:
        return len(self.data)

    @property
    def started(self) -> bool:
        return self.upload_id is not None

    def append(self, data: bytes) -> None:
        self.data.extend(data)

    def peek(self, size: int) -> bytes:
        return bytes(self.data[:size])

    def accept(self, size: int, upload_id: str) -> None:
        """Record that the server accepted the first ``size`` pending bytes."""
        del self.data[:size]
        if self.upload_id is None:
            self.upload_id = upload_id
        self.offset += size

    def reset(self) -> None:
        self.data = bytearray()
        self.upload_id = None
        self.offset = 0
