"""
Unit tests for SelfUpdater.

Verifies:
- the version check fails open
- a valid artifact replaces the install path atomically with mode 0755
- an invalid or failed artifact leaves the install path untouched
"""

import json
import stat

import pytest

from instance_watcher.application.self_updater import SelfUpdater, UpdateOutcome
from instance_watcher.domain.errors import DownloadError, NetworkError
from tests.fixtures.fake_adapters import FakeDownloader

VERSION_URL = "https://updates.example.com/VERSION"
ARTIFACT_URL = "https://updates.example.com/instance-watcher"
CURRENT = b"#!/bin/sh\necho current\n"
RELEASE = b"#!/bin/sh\necho release 1.2.0\n"


@pytest.fixture
def install_path(tmp_path):
    path = tmp_path / "bin" / "instance-watcher"
    path.parent.mkdir()
    path.write_bytes(CURRENT)
    path.chmod(0o755)
    return path


@pytest.fixture
def downloader():
    return FakeDownloader({VERSION_URL: b"1.2.0\n", ARTIFACT_URL: RELEASE})


@pytest.fixture
def updater(downloader, install_path) -> SelfUpdater:
    return SelfUpdater(
        downloader=downloader,
        current_version="1.1.0",
        version_url=VERSION_URL,
        artifact_url=ARTIFACT_URL,
        install_path=install_path,
    )


def leftovers(install_path):
    state_name = f".{install_path.name}.installed"
    return [
        p.name for p in install_path.parent.iterdir()
        if p != install_path and p.name != state_name
    ]


class TestCheckAndApply:

    def test_disabled_without_urls(self, downloader, install_path):
        updater = SelfUpdater(downloader, "1.1.0", None, None, install_path)

        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.DISABLED
        assert downloader.requested == []

    def test_same_version_is_up_to_date(self, updater, downloader, install_path):
        downloader.responses[VERSION_URL] = b"  1.1.0 \n"

        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.UP_TO_DATE
        assert result.remote_version == "1.1.0"
        assert ARTIFACT_URL not in downloader.requested
        assert install_path.read_bytes() == CURRENT

    @pytest.mark.parametrize("failure", [
        NetworkError("unreachable"),
        DownloadError("HTTP 500", status_code=500),
    ])
    def test_version_fetch_failure_fails_open(self, updater, downloader, install_path, failure):
        downloader.responses[VERSION_URL] = failure

        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.UP_TO_DATE
        assert result.remote_version is None
        assert install_path.read_bytes() == CURRENT

    def test_empty_version_body_fails_open(self, updater, downloader):
        downloader.responses[VERSION_URL] = b"\n"

        assert updater.check_and_apply().outcome == UpdateOutcome.UP_TO_DATE

    def test_new_version_is_applied(self, updater, install_path):
        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.APPLIED
        assert result.restart_required
        assert result.local_version == "1.1.0"
        assert result.remote_version == "1.2.0"
        assert install_path.read_bytes() == RELEASE
        assert stat.S_IMODE(install_path.stat().st_mode) == 0o755
        assert leftovers(install_path) == []

    @pytest.mark.parametrize("artifact", [
        b"<html>Access Denied</html>",
        b"",
        b"#",
    ])
    def test_invalid_artifact_is_rejected(self, updater, downloader, install_path, artifact):
        downloader.responses[ARTIFACT_URL] = artifact

        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.REJECTED
        assert not result.restart_required
        assert install_path.read_bytes() == CURRENT
        assert leftovers(install_path) == []

    def test_artifact_download_failure(self, updater, downloader, install_path):
        downloader.responses[ARTIFACT_URL] = DownloadError("HTTP 403", status_code=403)

        result = updater.check_and_apply()

        assert result.outcome == UpdateOutcome.FAILED
        assert install_path.read_bytes() == CURRENT
        assert leftovers(install_path) == []

    def test_missing_install_directory_fails(self, downloader, tmp_path):
        updater = SelfUpdater(
            downloader, "1.1.0", VERSION_URL, ARTIFACT_URL, tmp_path / "nope" / "instance-watcher"
        )

        assert updater.check_and_apply().outcome == UpdateOutcome.FAILED

    def test_custom_marker(self, downloader, install_path):
        downloader.responses[ARTIFACT_URL] = b"\x7fELF\x02\x01"
        updater = SelfUpdater(
            downloader, "1.1.0", VERSION_URL, ARTIFACT_URL, install_path, marker=b"\x7fELF"
        )

        assert updater.check_and_apply().outcome == UpdateOutcome.APPLIED
        assert install_path.read_bytes() == b"\x7fELF\x02\x01"

    def test_version_fetch_is_size_capped(self, updater, downloader):
        downloader.responses[VERSION_URL] = b"9" * 5000

        assert updater.check_and_apply().outcome == UpdateOutcome.UP_TO_DATE


class TestInstallState:
    """
    Test the record of applied releases.

    Verifies:
    - a successful install records the version and artifact digest
    - a restarted agent still reporting the old version does not reinstall
      the same release
    - a changed install path or a newer release is installed again
    """

    def restarted(self, downloader, install_path) -> SelfUpdater:
        # Same running version as before the update
        return SelfUpdater(
            downloader=downloader,
            current_version="1.1.0",
            version_url=VERSION_URL,
            artifact_url=ARTIFACT_URL,
            install_path=install_path,
        )

    def test_install_is_recorded(self, updater, install_path):
        updater.check_and_apply()

        state = json.loads(updater.state_path.read_text())
        assert state["version"] == "1.2.0"
        assert updater.installed_version() == "1.2.0"

    def test_same_release_is_not_reinstalled_after_restart(self, updater, downloader, install_path):
        assert updater.check_and_apply().outcome == UpdateOutcome.APPLIED
        downloader.requested.clear()

        result = self.restarted(downloader, install_path).check_and_apply()

        assert result.outcome == UpdateOutcome.UP_TO_DATE
        assert not result.restart_required
        assert downloader.requested == [VERSION_URL]
        assert install_path.read_bytes() == RELEASE

    def test_replaced_executable_is_updated_again(self, updater, downloader, install_path):
        updater.check_and_apply()
        install_path.write_bytes(CURRENT)

        result = self.restarted(downloader, install_path).check_and_apply()

        assert result.outcome == UpdateOutcome.APPLIED
        assert install_path.read_bytes() == RELEASE

    def test_newer_release_is_applied(self, updater, downloader, install_path):
        updater.check_and_apply()
        downloader.responses[VERSION_URL] = b"1.3.0"
        downloader.responses[ARTIFACT_URL] = b"#!/bin/sh\necho release 1.3.0\n"

        result = self.restarted(downloader, install_path).check_and_apply()

        assert result.outcome == UpdateOutcome.APPLIED
        assert result.remote_version == "1.3.0"

    def test_corrupt_state_is_ignored(self, updater, install_path):
        updater.state_path.write_text("not json")

        assert updater.installed_version() is None
        assert updater.check_and_apply().outcome == UpdateOutcome.APPLIED

    def test_rejected_artifact_records_nothing(self, updater, downloader):
        downloader.responses[ARTIFACT_URL] = b"<html>"

        updater.check_and_apply()

        assert not updater.state_path.exists()
