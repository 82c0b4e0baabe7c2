"""
Settings and configuration for dropbox-handle.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables when asked to.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

__all__ = ["Settings", "create_settings_from_env", "DEFAULT_CHUNK_SIZE", "ROOTS"]

DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024  # 4 MiB

ROOTS = ("sandbox", "dropbox")


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the Dropbox handle and its transport.

    Authentication:
        access_token: OAuth access token (required)
        access_secret: OAuth1 token secret (OAuth1 only)
        app_key: Application key (OAuth1 only)
        app_secret: Application secret (OAuth1 only)
        oauth2: Sign requests with an OAuth2 bearer token instead of OAuth1

    Handle Settings:
        chunk_size: Upload flush threshold and read prefetch size in bytes
        root: Access scope, "sandbox" (app folder) or "dropbox" (full access)

    Transport Settings:
        api_url: Base URL for metadata and file operations
        content_url: Base URL for file content transfers
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Number of retries on request timeouts (0=no retry)
        transport_options: Extra keyword arguments passed to httpx.Client
    """
    access_token: str
    access_secret: Optional[str] = None
    app_key: Optional[str] = None
    app_secret: Optional[str] = None
    oauth2: bool = False

    chunk_size: int = DEFAULT_CHUNK_SIZE
    root: str = "sandbox"

    api_url: str = "https://api.dropbox.com/1"
    content_url: str = "https://api-content.dropbox.com/1"
    http_timeout_s: float = 30.0
    http_retry: int = 0
    transport_options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.access_token:
            raise ValueError("access_token is required")

        # OAuth1 PLAINTEXT signing needs the full credential set
        if not self.oauth2:
            missing = [
                name for name in ("access_secret", "app_key", "app_secret")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"OAuth1 requires {', '.join(missing)} (or set oauth2=True)")

        if self.root not in ROOTS:
            raise ValueError(f"Invalid root: {self.root}. Must be one of: {', '.join(ROOTS)}")

        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {self.chunk_size}")

        url_pattern = r"^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$"
        for name in ("api_url", "content_url"):
            value = getattr(self, name)
            if not value or not re.match(url_pattern, value):
                raise ValueError(f"Invalid {name} format: {value}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        Authentication:
        - DROPBOX_ACCESS_TOKEN (required)
        - DROPBOX_ACCESS_SECRET (OAuth1 only)
        - DROPBOX_APP_KEY (OAuth1 only)
        - DROPBOX_APP_SECRET (OAuth1 only)
        - DROPBOX_OAUTH2 (default: false)

        Handle:
        - DROPBOX_CHUNK_SIZE (default: 4194304)
        - DROPBOX_ROOT (default: sandbox)

        Transport:
        - DROPBOX_API_URL (default: https://api.dropbox.com/1)
        - DROPBOX_CONTENT_URL (default: https://api-content.dropbox.com/1)
        - DROPBOX_HTTP_TIMEOUT (default: 30.0)
        - DROPBOX_HTTP_RETRY (default: 0)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    access_token = os.getenv("DROPBOX_ACCESS_TOKEN")
    if not access_token:
        raise ValueError("DROPBOX_ACCESS_TOKEN environment variable is required")

    return Settings(
        access_token=access_token,
        access_secret=os.getenv("DROPBOX_ACCESS_SECRET"),
        app_key=os.getenv("DROPBOX_APP_KEY"),
        app_secret=os.getenv("DROPBOX_APP_SECRET"),
        oauth2=str_to_bool(os.getenv("DROPBOX_OAUTH2", "false")),
        chunk_size=get_int("DROPBOX_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        root=os.getenv("DROPBOX_ROOT", "sandbox"),
        api_url=os.getenv("DROPBOX_API_URL", "https://api.dropbox.com/1"),
        content_url=os.getenv("DROPBOX_CONTENT_URL", "https://api-content.dropbox.com/1"),
        http_timeout_s=get_float("DROPBOX_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("DROPBOX_HTTP_RETRY", 0),
    )
