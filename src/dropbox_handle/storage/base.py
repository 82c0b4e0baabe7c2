"""
Transport interfaces for dropbox-handle.

These protocols define the boundary between the API layer and the HTTP
implementation, enabling clean dependency injection and testing with fakes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """
    Raw outcome of one signed HTTP call.

    Invariants:
    - status: HTTP status code as returned; non-2xx is not an error here
    - body: full response body bytes
    """
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


__all__ = ["TransportResponse", "Transport"]


@runtime_checkable
class Transport(Protocol):
    """Protocol for executing authenticated requests against the remote store."""

    def signed_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """
        Perform one authenticated HTTP call.

        Args:
            method: HTTP method
            url: Absolute endpoint URL
            params: Query parameters
            content: Request body bytes
            headers: Extra request headers

        Returns:
            Status, body and headers of the response

        Raises:
            TransportError: For network and timeout failures
        """
        ...

    def close(self) -> None:
        """Release connections held by the transport."""
        ...
