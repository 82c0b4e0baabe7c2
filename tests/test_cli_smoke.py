"""
CLI smoke tests against the in-memory Dropbox server.

Tests command wiring, output formats and exit codes without network
access. CLIContext.from_env is patched to build settings routed to the
fake server.
"""
from __future__ import annotations

import pytest
from typer.testing import CliRunner

from dropbox_handle.cli import app
from dropbox_handle.cli_context import CLIContext


@pytest.fixture
def cli(monkeypatch, settings):
    """CliRunner whose commands talk to the fake server."""
    monkeypatch.setattr(
        CLIContext,
        "from_env",
        classmethod(lambda cls, chunk_size=None: cls(settings=settings, chunk_size=chunk_size)),
    )
    return CliRunner()


class TestCLISmokeTests:
    """Smoke tests for CLI commands."""

    def test_cat_command(self, cli, server):
        server.add_file("/hello.txt", b"hello world\n" * 4)

        result = cli.invoke(app, ["cat", "/hello.txt"])

        assert result.exit_code == 0
        assert result.stdout_bytes == b"hello world\n" * 4

    def test_get_command(self, cli, server, tmp_path):
        server.add_file("/remote.bin", b"r" * 42)
        dest = tmp_path / "local.bin"

        result = cli.invoke(app, ["get", "/remote.bin", str(dest)])

        assert result.exit_code == 0
        assert "Downloaded" in result.stdout
        assert dest.read_bytes() == b"r" * 42

    def test_put_command(self, cli, server, tmp_path):
        src = tmp_path / "local.txt"
        src.write_bytes(b"p" * 25)

        result = cli.invoke(app, ["put", str(src), "/up/local.txt"])

        assert result.exit_code == 0
        assert "Uploaded" in result.stdout
        assert server.files["/up/local.txt"] == b"p" * 25
        assert [len(r.body) for r in server.calls("chunked_upload")] == [10, 10, 5]

    def test_put_with_chunk_size(self, cli, server, tmp_path):
        src = tmp_path / "local.txt"
        src.write_bytes(b"123456789")

        result = cli.invoke(app, ["put", str(src), "/nine.txt", "--chunk-size", "4"])

        assert result.exit_code == 0
        assert [len(r.body) for r in server.calls("chunked_upload")] == [4, 4, 1]

    def test_put_missing_local_file(self, cli, tmp_path):
        result = cli.invoke(app, ["put", str(tmp_path / "nope"), "/x"])
        assert result.exit_code != 0

    def test_ls_command(self, cli, server):
        server.add_file("/docs/readme.md", b"# hi")
        server.folders.add("/docs/img")

        result = cli.invoke(app, ["ls", "/docs"])

        assert result.exit_code == 0
        assert "readme.md" in result.stdout
        assert "img/" in result.stdout

    def test_ls_empty_folder(self, cli, server):
        server.folders.add("/empty")
        result = cli.invoke(app, ["ls", "/empty"])
        assert result.exit_code == 0
        assert "/empty is empty" in result.stdout

    def test_stat_command(self, cli, server):
        server.add_file("/a.txt", b"abc")

        result = cli.invoke(app, ["stat", "/a.txt"])

        assert result.exit_code == 0
        assert "Path: /a.txt" in result.stdout
        assert "Type: file" in result.stdout
        assert "Size: 3 B" in result.stdout

    def test_file_operation_commands(self, cli, server):
        server.add_file("/a.txt", b"abc")

        result = cli.invoke(app, ["cp", "/a.txt", "/b.txt"])
        assert result.exit_code == 0
        assert "Copied /a.txt -> /b.txt" in result.stdout

        result = cli.invoke(app, ["mv", "/b.txt", "/c.txt"])
        assert result.exit_code == 0
        assert "Moved /b.txt -> /c.txt" in result.stdout

        result = cli.invoke(app, ["mkdir", "/new"])
        assert result.exit_code == 0
        assert "Created /new" in result.stdout

        result = cli.invoke(app, ["rm", "/c.txt"])
        assert result.exit_code == 0
        assert "Deleted /c.txt" in result.stdout

        assert set(server.files) == {"/a.txt"}


class TestCLIExitCodes:
    """Test error mapping at the command boundary."""

    def test_missing_remote_file(self, cli):
        result = cli.invoke(app, ["cat", "/missing.txt"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_cat_folder_is_usage_error(self, cli, server):
        server.folders.add("/docs")
        result = cli.invoke(app, ["cat", "/docs"])
        assert result.exit_code == 2

    def test_remote_failure(self, cli, server):
        server.fail("fileops/create_folder", status=500)
        result = cli.invoke(app, ["mkdir", "/x"])
        assert result.exit_code == 3

    def test_failed_put_leaves_remote_file(self, cli, server, tmp_path):
        server.add_file("/dst.bin", b"ORIGINAL")
        src = tmp_path / "local.bin"
        src.write_bytes(b"a" * 35)
        server.fail("chunked_upload", status=500, times=5)

        result = cli.invoke(app, ["put", str(src), "/dst.bin"])

        assert result.exit_code == 3
        assert server.calls("commit_chunked_upload") == []
        assert server.files["/dst.bin"] == b"ORIGINAL"

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("DROPBOX_ACCESS_TOKEN")

        result = CliRunner().invoke(app, ["stat", "/a.txt"])

        assert result.exit_code == 2
        assert "DROPBOX_ACCESS_TOKEN" in result.output

    def test_help_messages(self):
        runner = CliRunner()
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Dropbox file handle CLI" in result.stdout

        result = runner.invoke(app, ["put", "--help"])
        assert result.exit_code == 0
        assert "Upload a local file" in result.stdout
