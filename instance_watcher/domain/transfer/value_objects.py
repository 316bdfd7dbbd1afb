"""
Transfer Value Objects

Timeout budget for a single remote fetch.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit


@dataclass(frozen=True)
class DownloadTimeouts:
    """
    Timeout budget for one fetch.

    connect bounds connection establishment. stall bounds each socket read,
    capped at total. total is checked between reads, so a transfer ends
    within total + read_timeout seconds.
    """
    connect: float = 30.0
    total: float = 1800.0
    stall: float = 60.0

    def __post_init__(self):
        """Validate timeout values."""
        if self.connect <= 0 or self.total <= 0 or self.stall <= 0:
            raise ValueError("Timeouts must be positive")
        if self.connect > self.total:
            raise ValueError(
                f"Connect timeout ({self.connect}s) exceeds total budget ({self.total}s)"
            )

    @property
    def read_timeout(self) -> float:
        """Per-read timeout passed to the transport."""
        return min(self.stall, self.total)


def redact_url(url: str) -> str:
    """
    Strip the query string and fragment from a URL for logging.

    Presigned URLs carry their signature in the query string.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url.split("?", 1)[0]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
