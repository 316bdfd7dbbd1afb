"""
Job Management Services

Domain services for job lifecycle management.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from ..errors import JobStateError
from ..events import JobCompletedEvent, JobFailedEvent
from .entities import DownloadJob
from .repositories import JobRepository
from .value_objects import JobStatus, RetentionPolicy

logger = logging.getLogger(__name__)


@dataclass
class GarbageCollectionReport:
    """Outcome of one garbage collection pass."""
    removed: List[Path] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed)


class JobManager:
    """
    Domain service for managing download job lifecycle.

    Coordinates job loading, terminal transitions and record retention.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        retention_policy: Optional[RetentionPolicy] = None,
    ):
        """
        Initialize JobManager with repository.

        Args:
            job_repository: Repository for job persistence
            retention_policy: Retention windows for terminal records
        """
        self.job_repo = job_repository
        self.retention = retention_policy or RetentionPolicy()

    def list_pending(self) -> Iterator[Path]:
        return self.job_repo.list_pending()

    def load_job(self, job_path: Path) -> DownloadJob:
        """
        Load a pending job.

        Raises:
            InvalidJobDescriptorError: If the descriptor is malformed
        """
        return self.job_repo.load(job_path)

    def complete_job(self, job: DownloadJob, final_path: str) -> JobCompletedEvent:
        """
        Complete a processing job and persist its terminal record.

        Args:
            job: Job in PROCESSING state
            final_path: Where the artifact was placed

        Returns:
            JobCompletedEvent

        Raises:
            JobStateError: If the job cannot be completed
            OSError: If the terminal record cannot be written
        """
        try:
            event = job.complete(final_path)
        except ValueError as e:
            raise JobStateError(str(e))

        self.job_repo.mark_terminal(job)
        return event

    def fail_job(
        self,
        job: DownloadJob,
        error_message: str,
        error_category: Optional[str] = None,
    ) -> JobFailedEvent:
        """
        Fail a job and persist its terminal record.

        Args:
            job: Job in PENDING or PROCESSING state
            error_message: Error description
            error_category: ErrorCategory value

        Returns:
            JobFailedEvent

        Raises:
            JobStateError: If the job already reached a terminal state
            OSError: If the terminal record cannot be written
        """
        try:
            event = job.fail(error_message, error_category)
        except ValueError as e:
            raise JobStateError(str(e))

        self.job_repo.mark_terminal(job)
        return event

    def garbage_collect(self, now: datetime) -> GarbageCollectionReport:
        """
        Delete terminal records older than their retention window.

        Failures to read or delete a record are logged and reported,
        never raised.

        Args:
            now: Reference time (timezone-aware UTC)

        Returns:
            GarbageCollectionReport with removed paths and errors
        """
        report = GarbageCollectionReport()

        for status in JobStatus.terminal_statuses():
            for record_path in self.job_repo.list_terminal(status):
                try:
                    finished_at = self.job_repo.get_finished_at(record_path)
                    if not self.retention.is_expired(status, finished_at, now):
                        continue
                    self.job_repo.delete(record_path)
                    report.removed.append(record_path)
                    logger.info(f"Removed expired {status.value} job record: {record_path.name}")
                except OSError as e:
                    error_msg = f"Failed to remove job record {record_path}: {e}"
                    report.errors.append(error_msg)
                    logger.warning(error_msg)

        return report
