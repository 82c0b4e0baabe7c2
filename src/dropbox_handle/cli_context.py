"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
handle instance, avoiding global state and enabling dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .handle import DropboxHandle
from .settings import Settings, create_settings_from_env


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Holds the settings and a lazily created handle that is reused for the
    whole command execution.
    """
    settings: Settings
    chunk_size: Optional[int] = None
    _handle: Optional[DropboxHandle] = None

    @classmethod
    def from_env(cls, chunk_size: Optional[int] = None) -> CLIContext:
        """
        Create CLI context from environment variables.

        Args:
            chunk_size: Override of the configured chunk size

        Returns:
            CLIContext with settings loaded from environment
        """
        return cls(settings=create_settings_from_env(), chunk_size=chunk_size)

    @property
    def handle(self) -> DropboxHandle:
        """Get or create the handle (lazy initialization)."""
        if self._handle is None:
            self._handle = DropboxHandle(self.settings, chunk_size=self.chunk_size)
        return self._handle

    def close(self) -> None:
        """Close the handle, committing any pending upload, and its transport."""
        if self._handle is not None:
            try:
                self._handle.close()
            finally:
                self._handle.api.close()
