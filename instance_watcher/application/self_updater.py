"""
Self Updater

Application service that keeps the installed agent executable in step with
the version published next to the update artifact.
"""

import hashlib
import json
import logging
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..domain.errors import DownloadError, UpdateError
from ..domain.transfer.downloader import IDownloader
from ..domain.transfer.value_objects import DownloadTimeouts, redact_url

logger = logging.getLogger(__name__)

VERSION_MAX_BYTES = 1024
EXECUTABLE_MODE = 0o755
HASH_CHUNK_SIZE = 64 * 1024


class UpdateOutcome(Enum):
    """Outcome of one update check."""
    DISABLED = "disabled"
    UP_TO_DATE = "up_to_date"
    APPLIED = "applied"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class UpdateResult:
    """
    Value object describing an update check.

    Attributes:
        outcome: What the check did
        local_version: Version of the running agent
        remote_version: Published version, when it could be fetched
        message: Human-readable summary for the log
    """
    outcome: UpdateOutcome
    local_version: str
    remote_version: Optional[str] = None
    message: str = ""

    @property
    def restart_required(self) -> bool:
        return self.outcome == UpdateOutcome.APPLIED


class SelfUpdater:
    """
    Application service replacing the installed executable with a newer release.

    The version check fails open: when the published version cannot be read
    the agent keeps running the code it has. The executable at install_path
    is only ever replaced by a single rename of a fully written, validated
    file in the same directory.

    The artifact must be self-contained (a zipapp or frozen binary carrying
    its own package), so the restarted process reports the published
    version. Each install is recorded in a hidden state file next to
    install_path; a release whose version and digest are already recorded
    there is not installed again.
    """

    def __init__(
        self,
        downloader: IDownloader,
        current_version: str,
        version_url: Optional[str],
        artifact_url: Optional[str],
        install_path: Path,
        marker: bytes = b"#!",
        timeouts: Optional[DownloadTimeouts] = None,
    ):
        """
        Initialize Self Updater.

        Args:
            downloader: Transfer adapter used for both the version and the artifact
            current_version: Version string of the running agent
            version_url: URL of the published version string, None disables updates
            artifact_url: URL of the release executable
            install_path: Path of the installed executable
            marker: Leading bytes every valid artifact starts with
            timeouts: Transfer time budget for the artifact
        """
        self.downloader = downloader
        self.current_version = current_version
        self.version_url = version_url
        self.artifact_url = artifact_url
        self.install_path = Path(install_path)
        self.marker = marker
        self.timeouts = timeouts or DownloadTimeouts()
        self.state_path = self.install_path.with_name(f".{self.install_path.name}.installed")

    @property
    def enabled(self) -> bool:
        return bool(self.version_url and self.artifact_url)

    def installed_version(self) -> Optional[str]:
        """
        Version recorded by the last successful install.

        Returns:
            The recorded version if install_path still holds the recorded
            artifact, otherwise None
        """
        try:
            state = json.loads(self.state_path.read_text(encoding="utf-8"))
            version, digest = state["version"], state["sha256"]
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable update state {self.state_path}: {e}")
            return None

        try:
            if _sha256_of(self.install_path) != digest:
                return None
        except OSError:
            return None
        return version

    def check_and_apply(self) -> UpdateResult:
        """
        Compare versions and install the published release when they differ.

        Returns:
            UpdateResult describing what happened; never raises
        """
        if not self.enabled:
            return self._result(UpdateOutcome.DISABLED, message="Self-update is not configured")

        remote_version = self.fetch_remote_version()
        if remote_version is None:
            return self._result(
                UpdateOutcome.UP_TO_DATE,
                message="Published version unavailable, keeping current version",
            )

        if remote_version == self.current_version:
            logger.debug(f"Agent is up to date at version {self.current_version}")
            return self._result(
                UpdateOutcome.UP_TO_DATE,
                remote_version,
                f"Running version {self.current_version} is current",
            )

        if self.installed_version() == remote_version:
            logger.warning(
                f"Version {remote_version} is already installed at {self.install_path} "
                f"but the running agent reports {self.current_version}; not reinstalling"
            )
            return self._result(
                UpdateOutcome.UP_TO_DATE,
                remote_version,
                f"Version {remote_version} already installed",
            )

        logger.info(
            f"Update available: {self.current_version} -> {remote_version}, "
            f"fetching {redact_url(self.artifact_url)}"
        )

        try:
            self._install()
        except UpdateError as e:
            logger.warning(f"Rejected update to {remote_version}: {e}")
            return self._result(UpdateOutcome.REJECTED, remote_version, str(e))
        except (DownloadError, OSError) as e:
            logger.error(f"Failed to apply update to {remote_version}: {e}")
            return self._result(UpdateOutcome.FAILED, remote_version, str(e))

        self._record_install(remote_version)
        logger.info(f"Installed version {remote_version} at {self.install_path}, restart required")
        return self._result(
            UpdateOutcome.APPLIED,
            remote_version,
            f"Updated from {self.current_version} to {remote_version}",
        )

    def fetch_remote_version(self) -> Optional[str]:
        """
        Read the published version string.

        Returns:
            Stripped version text, or None if it could not be fetched or is empty
        """
        try:
            raw = self.downloader.fetch(
                self.version_url,
                DownloadTimeouts(connect=self.timeouts.connect, total=self.timeouts.connect),
                VERSION_MAX_BYTES,
            )
        except DownloadError as e:
            logger.warning(f"Version check failed: {e}")
            return None

        version = raw.decode("utf-8", errors="replace").strip()
        if not version:
            logger.warning(f"Version check returned an empty body from {redact_url(self.version_url)}")
            return None
        return version

    def _install(self) -> None:
        """
        Download, validate and atomically install the artifact.

        Raises:
            UpdateError: If the artifact is empty or lacks the expected marker
            DownloadError: If the artifact cannot be fetched
            OSError: If the artifact cannot be written or renamed
        """
        install_dir = self.install_path.parent
        tmp_path = install_dir / f".{self.install_path.name}.{uuid.uuid4().hex}.update"

        try:
            self.downloader.fetch_to_file(self.artifact_url, tmp_path, self.timeouts)

            with open(tmp_path, "rb") as f:
                head = f.read(max(len(self.marker), 1))
            if not head:
                raise UpdateError("Artifact is empty")
            if not head.startswith(self.marker):
                raise UpdateError(
                    f"Artifact does not start with the expected marker {self.marker!r}"
                )

            os.chmod(tmp_path, EXECUTABLE_MODE)
            os.replace(tmp_path, self.install_path)
        except BaseException:
            self._discard(tmp_path)
            raise

    def _record_install(self, version: str) -> None:
        tmp_path = self.state_path.with_name(f"{self.state_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            state = {"version": version, "sha256": _sha256_of(self.install_path)}
            tmp_path.write_text(json.dumps(state), encoding="utf-8")
            os.replace(tmp_path, self.state_path)
        except OSError as e:
            self._discard(tmp_path)
            logger.warning(f"Could not record installed version {version}: {e}")

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove update temporary file {path}: {e}")

    def _result(
        self,
        outcome: UpdateOutcome,
        remote_version: Optional[str] = None,
        message: str = "",
    ) -> UpdateResult:
        return UpdateResult(
            outcome=outcome,
            local_version=self.current_version,
            remote_version=remote_version,
            message=message,
        )


def _sha256_of(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
