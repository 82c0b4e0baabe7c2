from .api import DropboxApi, normalize_path
from .base import Transport, TransportResponse
from .http_transport import HttpTransport

__all__ = ["DropboxApi", "HttpTransport", "Transport", "TransportResponse", "normalize_path"]
