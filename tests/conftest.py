"""Root pytest configuration for dropbox-handle tests."""
import pytest

from dropbox_handle.handle import DropboxHandle
from dropbox_handle.settings import Settings
from dropbox_handle.storage.api import DropboxApi

from .storage.fakes.fake_dropbox import FakeDropboxServer


# Clear ambient credentials so tests never reach a real account
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up test environment variables."""
    for name in (
        "DROPBOX_ACCESS_SECRET", "DROPBOX_APP_KEY", "DROPBOX_APP_SECRET",
        "DROPBOX_CHUNK_SIZE", "DROPBOX_ROOT", "DROPBOX_API_URL", "DROPBOX_CONTENT_URL",
        "DROPBOX_HTTP_TIMEOUT", "DROPBOX_HTTP_RETRY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DROPBOX_ACCESS_TOKEN", "test-token")
    monkeypatch.setenv("DROPBOX_OAUTH2", "true")


@pytest.fixture
def server():
    """In-memory Dropbox API."""
    return FakeDropboxServer()


@pytest.fixture
def settings(server):
    """Standard test settings routed to the fake server."""
    return Settings(
        access_token="test-token",
        oauth2=True,
        chunk_size=10,
        transport_options={"transport": server.transport()},
    )


@pytest.fixture
def api(settings):
    client = DropboxApi(settings)
    yield client
    client.close()


@pytest.fixture
def handle(settings, api):
    """Handle with a 10-byte chunk size over the fake server."""
    return DropboxHandle(settings, api=api)
