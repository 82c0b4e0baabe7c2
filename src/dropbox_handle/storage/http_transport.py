"""
HTTP transport for the Dropbox API.

Signs every request with OAuth1 PLAINTEXT or an OAuth2 bearer token and
retries timed-out requests with exponential backoff.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional
from urllib.parse import quote

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import TransportError
from ..settings import Settings
from .base import Transport, TransportResponse

__all__ = ["HttpTransport", "authorization_header"]

logger = logging.getLogger(__name__)

USER_AGENT = "dropbox-handle/0.1.0"


def authorization_header(settings: Settings) -> str:
    """
    Build the Authorization header value for the configured OAuth flavour.

    OAuth2 uses a bearer token. OAuth1 uses the PLAINTEXT signature method,
    where the signature is the percent-encoded app secret and token secret
    joined by "&".
    """
    if settings.oauth2:
        return f"Bearer {settings.access_token}"

    signature = f"{quote(settings.app_secret or '', safe='')}&{quote(settings.access_secret or '', safe='')}"
    params = [
        ("oauth_version", "1.0"),
        ("oauth_signature_method", "PLAINTEXT"),
        ("oauth_consumer_key", settings.app_key or ""),
        ("oauth_token", settings.access_token),
        ("oauth_signature", signature),
    ]
    return "OAuth " + ", ".join(f'{name}="{value}"' for name, value in params)


class HttpTransport(Transport):
    """
    Transport backed by httpx.

    Non-2xx responses are returned to the caller unchanged; only network
    level failures raise. Timeouts are retried ``settings.http_retry`` times.
    """

    def __init__(self, settings: Settings):
        """
        Initialize HTTP transport.

        Args:
            settings: Settings with credentials, timeout, retry count and
                extra ``httpx.Client`` options
        """
        self._settings = settings

        options = dict(settings.transport_options)
        headers = dict(options.pop("headers", {}) or {})
        headers.setdefault("User-Agent", USER_AGENT)
        headers["Authorization"] = authorization_header(settings)
        options.setdefault("timeout", settings.http_timeout_s)
        options.setdefault("follow_redirects", True)

        self.client = httpx.Client(headers=headers, **options)

        self._retrying = Retrying(
            stop=stop_after_attempt(settings.http_retry + 1),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        )

        logger.debug(
            f"HTTP transport using {'OAuth2' if settings.oauth2 else 'OAuth1'} auth, "
            f"timeout: {settings.http_timeout_s}s, retry: {settings.http_retry}"
        )

    def signed_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        try:
            response = self._retrying(
                self.client.request,
                method,
                url,
                params=params,
                content=content,
                headers=headers,
            )
        except httpx.RequestError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return TransportResponse(
            status=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
