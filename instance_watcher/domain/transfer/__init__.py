"""
Transfer Domain

Contracts for retrieving remote objects over presigned URLs.
"""

from .downloader import IDownloader
from .value_objects import DownloadTimeouts, redact_url

__all__ = [
    "IDownloader",
    "DownloadTimeouts",
    "redact_url",
]
