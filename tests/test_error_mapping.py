"""
Test error mapping and CLI exit code functionality.

Validates that exceptions are correctly mapped to exit codes and that
the run_and_exit wrapper handles errors appropriately for CLI commands.
"""
from __future__ import annotations

import pytest
import typer

from dropbox_handle.errors import (
    ApiError,
    DirectoryError,
    DownloadError,
    DropboxHandleError,
    InvalidModeError,
    NotFoundError,
    RemoteError,
    SeekError,
    TransportError,
    UploadError,
)
from dropbox_handle.operations.mappers import EXIT_CODES, exit_code_for, run_and_exit


class TestExitCodeMapping:
    """Test exception to exit code mapping."""

    @pytest.mark.parametrize("exc,code", [
        (NotFoundError("missing"), 1),
        (ValueError("bad mode"), 2),
        (InvalidModeError("wrong mode"), 2),
        (SeekError("negative"), 2),
        (DirectoryError("is a folder"), 2),
        (UploadError("append failed", status=500), 3),
        (DownloadError("fetch failed", status=503), 3),
        (ApiError("metadata failed", status=500), 3),
        (TransportError("connection refused"), 3),
    ])
    def test_known_exceptions_mapped_correctly(self, exc, code):
        assert exit_code_for(exc) == code

    def test_unknown_exception_maps_to_fallback(self):
        assert exit_code_for(RuntimeError("test")) == 3
        assert exit_code_for(PermissionError("test")) == 3

    def test_exit_code_completeness(self):
        """Every concrete handle error has an explicit code."""
        concrete = {
            NotFoundError, InvalidModeError, SeekError, DirectoryError,
            UploadError, DownloadError, ApiError, TransportError,
        }
        assert {cls.__name__ for cls in concrete} <= set(EXIT_CODES)


class TestErrorTaxonomy:
    """Test error class relationships and attributes."""

    def test_hierarchy(self):
        for cls in (UploadError, DownloadError, ApiError):
            assert issubclass(cls, RemoteError)
        for cls in (RemoteError, NotFoundError, InvalidModeError, SeekError, DirectoryError, TransportError):
            assert issubclass(cls, DropboxHandleError)

    def test_remote_error_attributes(self):
        error = UploadError("commit failed", status=409, remote_message="conflict")
        assert error.status == 409
        assert error.remote_message == "conflict"
        assert str(error) == "commit failed"

    def test_transport_error_context(self):
        error = TransportError("timed out")
        assert str(error) == "timed out"

        error.operation = "chunked_upload"
        error.offset = 4194304
        assert str(error) == "timed out (operation=chunked_upload, offset=4194304)"


class TestRunAndExit:
    """Test run_and_exit wrapper functionality."""

    def test_successful_function_returns_result(self):
        assert run_and_exit(lambda: "success result") == "success result"

    def test_function_exception_raises_typer_exit(self):
        def failing_func():
            raise NotFoundError("Not found: /a.txt")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing_func)

        assert exc_info.value.exit_code == 1

    def test_exception_chaining_preserved(self):
        original_error = ValueError("original error")

        def failing_func():
            raise original_error

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing_func)

        assert exc_info.value.__cause__ is original_error

    def test_error_printed_to_stderr(self, capsys):
        def failing_func():
            raise DownloadError("download failed for /a.txt: HTTP 503")

        with pytest.raises(typer.Exit):
            run_and_exit(failing_func)

        captured = capsys.readouterr()
        assert "download failed for /a.txt" in captured.err
        assert captured.out == ""

    def test_nested_exceptions_use_outer_type(self):
        def nested_func():
            try:
                raise ValueError("inner error")
            except ValueError as e:
                raise UploadError("outer") from e

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(nested_func)

        assert exc_info.value.exit_code == 3
