"""
Job Management Entities

Domain entity for download jobs read from the watch directory.
"""

import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import unquote, urlsplit

from ..errors import ErrorCategory, InvalidJobDescriptorError, describe_error
from ..events import JobCompletedEvent, JobFailedEvent, JobStartedEvent
from .value_objects import JobStatus

DESCRIPTOR_EXTENSION = ".json"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def job_id_from_path(source_path: Path) -> str:
    """Derive the job identifier from a descriptor file name."""
    name = Path(source_path).name
    if name.endswith(DESCRIPTOR_EXTENSION):
        return name[: -len(DESCRIPTOR_EXTENSION)]
    return name


def is_safe_filename(filename: str) -> bool:
    """
    Check that a file name is a single path component.

    Rejects separators, NUL bytes and the special names '.' and '..'.
    """
    if not filename or filename in (".", ".."):
        return False
    if "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    return True


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidJobDescriptorError(
            f"Field '{key}' must be a string, got {type(value).__name__}"
        )
    value = value.strip()
    return value or None


def _parse_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", ""):
        return value.strip().lower() == "true"
    raise InvalidJobDescriptorError(f"Field '{key}' must be a boolean, got {value!r}")


@dataclass
class DownloadJob:
    """
    Entity representing one download job descriptor.

    Manages the job lifecycle. Only terminal states are ever persisted;
    PROCESSING exists in memory while the processor works on the job.
    """

    job_id: str
    source_path: Path
    url: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    target_path: Optional[str] = None
    filename: Optional[str] = None
    encrypted: bool = False
    encryption_key: Optional[str] = None
    error_message: Optional[str] = None
    error_category: Optional[str] = None
    final_path: Optional[str] = None
    descriptor: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @classmethod
    def from_descriptor(cls, source_path: Path, data: Any) -> "DownloadJob":
        """
        Build a pending job from a parsed descriptor.

        Args:
            source_path: Path of the descriptor file in the watch directory
            data: Decoded JSON content of the descriptor

        Returns:
            New DownloadJob in PENDING state

        Raises:
            InvalidJobDescriptorError: If the descriptor fails validation
        """
        source_path = Path(source_path)
        if not isinstance(data, dict):
            raise InvalidJobDescriptorError(
                f"Job descriptor must be a JSON object, got {type(data).__name__}"
            )

        url = _optional_str(data, "url")
        if not url:
            raise InvalidJobDescriptorError("No download URL in job file")

        filename = _optional_str(data, "filename")
        if filename is not None and not is_safe_filename(filename):
            raise InvalidJobDescriptorError(
                f"Field 'filename' must be a bare file name, got {filename!r}"
            )

        now = utc_now()
        return cls(
            job_id=job_id_from_path(source_path),
            source_path=source_path,
            url=url,
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
            target_path=_optional_str(data, "targetPath"),
            filename=filename,
            encrypted=_parse_bool(data.get("encrypted"), "encrypted"),
            encryption_key=_optional_str(data, "encryptionKey"),
            descriptor=dict(data),
        )

    @classmethod
    def unreadable(cls, source_path: Path, descriptor: Optional[Dict[str, Any]] = None) -> "DownloadJob":
        """
        Build a placeholder job for a descriptor that could not be parsed.

        The placeholder exists only so the job can be failed and recorded.
        """
        source_path = Path(source_path)
        now = utc_now()
        return cls(
            job_id=job_id_from_path(source_path),
            source_path=source_path,
            url="",
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
            descriptor=descriptor,
        )

    @property
    def requires_decryption(self) -> bool:
        """True when the payload is marked encrypted and a wrapped key is present."""
        return self.encrypted and bool(self.encryption_key)

    def resolve_target_dir(self, default_dir: Path) -> Path:
        """Target directory from the descriptor, or the default download directory."""
        if self.target_path:
            return Path(self.target_path).expanduser()
        return Path(default_dir)

    def resolve_filename(self) -> str:
        """
        Final file name for the placed artifact.

        Uses the descriptor's filename, else the last segment of the URL path,
        else a name derived from the job id.
        """
        if self.filename:
            return self.filename

        derived = posixpath.basename(unquote(urlsplit(self.url).path))
        if is_safe_filename(derived):
            return derived
        return f"download-{self.job_id}"

    def start(self) -> Optional[JobStartedEvent]:
        """
        Transition job to processing state.

        If the job is already processing, this method is idempotent
        and does nothing.

        Returns:
            JobStartedEvent if state transition occurred, None if already processing

        Raises:
            ValueError: If job is not in pending or processing state
        """
        if self.status not in [JobStatus.PENDING, JobStatus.PROCESSING]:
            raise ValueError(f"Cannot start job in {self.status.value} state")

        if self.status == JobStatus.PROCESSING:
            return None

        self.status = JobStatus.PROCESSING
        self.updated_at = utc_now()
        return JobStartedEvent(
            aggregate_id=self.job_id,
            occurred_at=self.updated_at,
            url=self.url,
            encrypted=self.requires_decryption,
        )

    def complete(self, final_path: str) -> JobCompletedEvent:
        """
        Mark job as completed.

        Args:
            final_path: Where the downloaded file was placed

        Returns:
            JobCompletedEvent indicating successful completion

        Raises:
            ValueError: If job is not in processing state
        """
        if self.status != JobStatus.PROCESSING:
            raise ValueError(f"Cannot complete job in {self.status.value} state")

        self.status = JobStatus.COMPLETED
        self.final_path = str(final_path)
        self.updated_at = utc_now()
        return JobCompletedEvent(
            aggregate_id=self.job_id,
            occurred_at=self.updated_at,
            final_path=self.final_path,
        )

    def fail(self, error_message: str, error_category: Optional[str] = None) -> JobFailedEvent:
        """
        Mark job as failed.

        Args:
            error_message: Error description
            error_category: Optional error category for tracking

        Returns:
            JobFailedEvent indicating failure

        Raises:
            ValueError: If job already reached a terminal state
        """
        if self.status.is_terminal():
            raise ValueError(f"Cannot fail job in {self.status.value} state")

        self.status = JobStatus.FAILED
        self.error_message = error_message
        self.error_category = error_category
        self.final_path = None
        self.updated_at = utc_now()
        return JobFailedEvent(
            aggregate_id=self.job_id,
            occurred_at=self.updated_at,
            error_message=error_message,
            error_category=error_category or "system_error",
        )

    def is_terminal(self) -> bool:
        """Check if job is in terminal state (completed or failed)."""
        return self.status.is_terminal()

    def to_record(self) -> dict:
        """
        Convert job to the dictionary stored in its terminal record.

        The wrapped key is left out of the stored descriptor. Failed records
        also carry the operator-facing title and action for their category.
        """
        descriptor = None
        if self.descriptor is not None:
            descriptor = {
                key: value for key, value in self.descriptor.items()
                if key != "encryptionKey"
            }
        record = {
            "job_id": self.job_id,
            "status": self.status.value,
            "url": self.url,
            "target_path": self.target_path,
            "filename": self.filename,
            "encrypted": self.encrypted,
            "final_path": self.final_path,
            "error_message": self.error_message,
            "error_category": self.error_category,
            "created_at": self.created_at.isoformat(),
            "finished_at": self.updated_at.isoformat(),
            "descriptor": descriptor,
        }

        if self.status == JobStatus.FAILED:
            try:
                category = ErrorCategory(self.error_category)
            except ValueError:
                category = ErrorCategory.SYSTEM_ERROR
            error_info = describe_error(category, self.error_message)
            record["error_title"] = error_info["title"]
            record["error_action"] = error_info["action"]
        return record
