"""
Integration tests for HttpDownloader against a local HTTP server.

Verifies:
- content-encoded objects are written exactly as stored
- identity encoding is requested
- a stalled body fails within the stall timeout
- non-2xx responses are mapped to DownloadError
"""

import gzip
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from instance_watcher.domain.errors import DownloadError, DownloadTimeoutError
from instance_watcher.domain.transfer.value_objects import DownloadTimeouts
from instance_watcher.infrastructure.http_downloader import HttpDownloader, build_session

STORED_GZIP = gzip.compress(b"A" * 100)


class ObjectStoreHandler(BaseHTTPRequestHandler):
    """Serves a few fixed objects and records request headers."""

    seen_headers = []

    def log_message(self, format, *args):
        pass

    def do_GET(self):
        type(self).seen_headers.append(dict(self.headers))

        if self.path == "/gzipped.bin":
            self.send_response(200)
            self.send_header("Content-Type", "application/octet-stream")
            self.send_header("Content-Encoding", "gzip")
            self.send_header("Content-Length", str(len(STORED_GZIP)))
            self.end_headers()
            self.wfile.write(STORED_GZIP)
        elif self.path == "/stalled.bin":
            self.send_response(200)
            self.send_header("Content-Length", "1000")
            self.end_headers()
            self.wfile.write(b"x" * 10)
            self.wfile.flush()
            time.sleep(2)
        else:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()


@pytest.fixture
def server():
    ObjectStoreHandler.seen_headers = []
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), ObjectStoreHandler)
    httpd.daemon_threads = True
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


@pytest.fixture
def downloader() -> HttpDownloader:
    session = build_session()
    # Keep proxy settings from the environment away from the loopback server
    session.trust_env = False
    return HttpDownloader(session=session, default_timeouts=DownloadTimeouts(connect=5, total=30))


class TestContentEncoding:

    def test_gzip_encoded_object_is_placed_as_stored(self, server, downloader, tmp_path):
        destination = tmp_path / "placed.bin"

        written = downloader.fetch_to_file(f"{server}/gzipped.bin", destination)

        assert written == len(STORED_GZIP)
        assert destination.read_bytes() == STORED_GZIP

    def test_identity_encoding_is_requested(self, server, downloader):
        downloader.fetch(f"{server}/gzipped.bin")

        assert ObjectStoreHandler.seen_headers[-1]["Accept-Encoding"] == "identity"


class TestTimeoutsAndErrors:

    def test_stalled_body_fails_within_stall_timeout(self, server, downloader, tmp_path):
        timeouts = DownloadTimeouts(connect=5, total=30, stall=0.5)
        started = time.monotonic()

        with pytest.raises(DownloadTimeoutError):
            downloader.fetch_to_file(f"{server}/stalled.bin", tmp_path / "out.bin", timeouts)

        assert time.monotonic() - started < 2

    def test_missing_object_is_download_error(self, server, downloader):
        with pytest.raises(DownloadError) as exc_info:
            downloader.fetch(f"{server}/missing.bin")

        assert exc_info.value.status_code == 404
