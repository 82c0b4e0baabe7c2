# Fake implementations for testing

from .fake_dropbox import FakeDropboxServer, RecordedRequest

__all__ = ["FakeDropboxServer", "RecordedRequest"]
