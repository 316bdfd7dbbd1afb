"""
Watcher Configuration

Environment-driven configuration for the instance watcher. Every variable
uses the WATCHER_ prefix.
"""

import os
import tempfile
from datetime import timedelta
from typing import Optional


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _get_optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


class WatcherConfig:
    """Watcher configuration."""

    def __init__(self):
        # Directories
        self.watch_dir = os.getenv("WATCHER_WATCH_DIR", "/tmp/slyd-downloads")
        self.download_dir = os.getenv("WATCHER_DOWNLOAD_DIR", "/home/ubuntu/downloads")
        self.scratch_dir = os.getenv(
            "WATCHER_SCRATCH_DIR",
            os.path.join(tempfile.gettempdir(), "instance-watcher"),
        )

        # Logging
        # An empty value disables the file handler
        self.log_file = os.getenv("WATCHER_LOG_FILE", "/var/log/instance-watcher.log").strip() or None
        self.log_level = os.getenv("WATCHER_LOG_LEVEL", "INFO").upper()

        # Decryption
        self.private_key_path = os.getenv(
            "WATCHER_PRIVATE_KEY_PATH", "/root/.slyd/instance-private.key"
        )
        self.private_key_passphrase = _get_optional("WATCHER_PRIVATE_KEY_PASSPHRASE")

        # Scheduling
        self.check_interval = _get_float("WATCHER_CHECK_INTERVAL", 5.0)
        self.update_check_interval = _get_float("WATCHER_UPDATE_CHECK_INTERVAL", 3600.0)

        # Transfers
        self.connect_timeout = _get_float("WATCHER_CONNECT_TIMEOUT", 30.0)
        self.transfer_timeout = _get_float("WATCHER_TRANSFER_TIMEOUT", 1800.0)
        self.stall_timeout = _get_float("WATCHER_STALL_TIMEOUT", 60.0)

        # Self-update
        self.update_base_url = _get_optional("WATCHER_UPDATE_BASE_URL")
        base = self.update_base_url.rstrip("/") if self.update_base_url else None
        self.version_url = _get_optional("WATCHER_VERSION_URL") or (
            f"{base}/VERSION" if base else None
        )
        self.artifact_url = _get_optional("WATCHER_ARTIFACT_URL") or (
            f"{base}/instance-watcher" if base else None
        )
        self.install_path = os.getenv("WATCHER_INSTALL_PATH", "/usr/local/bin/instance-watcher")
        self.update_marker = os.getenv("WATCHER_UPDATE_MARKER", "#!").encode("utf-8")

        # Retention
        self.completed_retention = timedelta(
            hours=_get_float("WATCHER_COMPLETED_RETENTION_HOURS", 24.0)
        )
        self.failed_retention = timedelta(
            days=_get_float("WATCHER_FAILED_RETENTION_DAYS", 7.0)
        )

    @property
    def self_update_enabled(self) -> bool:
        return bool(self.version_url and self.artifact_url)
