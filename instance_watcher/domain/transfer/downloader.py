"""
Downloader Interface

Abstract interface for retrieving remote objects.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .value_objects import DownloadTimeouts


class IDownloader(ABC):
    """
    Abstract interface for single-attempt remote retrieval.

    Implementations never retry; a DownloadError is final for the caller's
    current attempt.
    """

    @abstractmethod
    def fetch(
        self,
        url: str,
        timeouts: Optional[DownloadTimeouts] = None,
        max_bytes: Optional[int] = None,
    ) -> bytes:
        """
        Fetch a remote object into memory.

        Args:
            url: Source URL
            timeouts: Timeout budget, implementation default if None
            max_bytes: Optional cap on the body size

        Returns:
            Response body

        Raises:
            DownloadError: On any network or HTTP failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def fetch_to_file(
        self,
        url: str,
        destination: Path,
        timeouts: Optional[DownloadTimeouts] = None,
    ) -> int:
        """
        Stream a remote object into a local file.

        Args:
            url: Source URL
            destination: File to create or overwrite
            timeouts: Timeout budget, implementation default if None

        Returns:
            Number of bytes written

        Raises:
            DownloadError: On any network or HTTP failure
        """
        pass  # pragma: no cover
