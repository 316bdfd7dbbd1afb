"""
HTTP Downloader Implementation

Concrete implementation of IDownloader using requests.

Each fetch is a single attempt: no retry adapter is mounted on the session.
The connect timeout bounds connection establishment, the stall timeout bounds
each read, and the total budget is enforced across the streamed body with a
monotonic deadline.

Bodies are written exactly as stored. Identity encoding is requested and the
raw stream is read without Content-Encoding decoding, so an object stored
gzip-encoded is placed gzip-encoded.
"""

import logging
import os
import time
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter

from .. import __version__
from ..domain.errors import DownloadError, DownloadTimeoutError, NetworkError
from ..domain.transfer.downloader import IDownloader
from ..domain.transfer.value_objects import DownloadTimeouts, redact_url

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def build_session() -> requests.Session:
    """Create a requests session with retries disabled."""
    adapter = HTTPAdapter(max_retries=0)
    sess = requests.Session()
    sess.mount("https://", adapter)
    sess.mount("http://", adapter)
    sess.headers.update({
        "User-Agent": f"instance-watcher/{__version__}",
        "Accept-Encoding": "identity",
    })
    return sess


class HttpDownloader(IDownloader):
    """
    requests-based downloader for presigned object-store URLs.

    Attributes:
        session: requests session used for all fetches
        default_timeouts: Budget used when a call passes none
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        default_timeouts: Optional[DownloadTimeouts] = None,
    ):
        self.session = session or build_session()
        self.default_timeouts = default_timeouts or DownloadTimeouts()

    def fetch(
        self,
        url: str,
        timeouts: Optional[DownloadTimeouts] = None,
        max_bytes: Optional[int] = None,
    ) -> bytes:
        buffer = BytesIO()
        self._stream(url, buffer, timeouts or self.default_timeouts, max_bytes)
        return buffer.getvalue()

    def fetch_to_file(
        self,
        url: str,
        destination: Path,
        timeouts: Optional[DownloadTimeouts] = None,
    ) -> int:
        destination = Path(destination)
        with open(destination, "wb") as f:
            written = self._stream(url, f, timeouts or self.default_timeouts, None)
            f.flush()
            os.fsync(f.fileno())

        logger.debug(f"Wrote {written} bytes from {redact_url(url)} to {destination}")
        return written

    def _stream(
        self,
        url: str,
        sink: BinaryIO,
        timeouts: DownloadTimeouts,
        max_bytes: Optional[int],
    ) -> int:
        safe_url = redact_url(url)
        deadline = time.monotonic() + timeouts.total

        try:
            with self.session.get(
                url,
                stream=True,
                timeout=(timeouts.connect, timeouts.read_timeout),
            ) as response:
                if not 200 <= response.status_code < 300:
                    raise DownloadError(
                        f"HTTP {response.status_code} from {safe_url}",
                        status_code=response.status_code,
                    )

                written = 0
                for chunk in response.raw.stream(CHUNK_SIZE, decode_content=False):
                    if time.monotonic() > deadline:
                        raise DownloadTimeoutError(
                            f"Transfer from {safe_url} exceeded {timeouts.total:.0f}s"
                        )
                    if not chunk:
                        continue
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise DownloadError(
                            f"Response from {safe_url} exceeded {max_bytes} bytes"
                        )
                    sink.write(chunk)

                return written

        except requests.exceptions.Timeout as e:
            raise DownloadTimeoutError(f"Timed out fetching {safe_url}: {e}", e)
        except urllib3.exceptions.ReadTimeoutError as e:
            raise DownloadTimeoutError(f"Stalled reading from {safe_url}: {e}", e)
        except urllib3.exceptions.HTTPError as e:
            raise NetworkError(f"Transfer from {safe_url} was interrupted: {e}", e)
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Cannot reach {safe_url}: {e}", e)
        except requests.exceptions.RequestException as e:
            raise DownloadError(f"Request for {safe_url} failed: {e}", e)
