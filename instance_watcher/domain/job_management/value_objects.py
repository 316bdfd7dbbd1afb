"""
Job Management Value Objects

Immutable value objects for job status and record retention.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class JobStatus(Enum):
    """Job status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"  # in memory only, never written to disk
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if status is terminal (completed or failed)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    def is_active(self) -> bool:
        """Check if job is still eligible for processing."""
        return self in (JobStatus.PENDING, JobStatus.PROCESSING)

    @property
    def suffix(self) -> str:
        """
        File suffix of the terminal record for this status.

        Raises:
            ValueError: If the status is not terminal
        """
        if not self.is_terminal():
            raise ValueError(f"{self.value} jobs have no terminal record")
        return f".{self.value}"

    @classmethod
    def terminal_statuses(cls) -> tuple:
        return (cls.COMPLETED, cls.FAILED)


@dataclass(frozen=True)
class RetentionPolicy:
    """
    How long terminal job records are kept before garbage collection.

    A record is expired once its age is greater than or equal to the
    retention window of its status.
    """
    completed: timedelta = timedelta(hours=24)
    failed: timedelta = timedelta(days=7)

    def __post_init__(self):
        """Validate retention windows."""
        if self.completed < timedelta(0) or self.failed < timedelta(0):
            raise ValueError("Retention windows must not be negative")

    def retention_for(self, status: JobStatus) -> timedelta:
        if status == JobStatus.COMPLETED:
            return self.completed
        if status == JobStatus.FAILED:
            return self.failed
        raise ValueError(f"No retention window for {status.value} jobs")

    def is_expired(self, status: JobStatus, finished_at: datetime, now: datetime) -> bool:
        """
        Check whether a terminal record should be deleted.

        Args:
            status: Terminal status of the record
            finished_at: When the job reached its terminal state
            now: Reference time for the check

        Returns:
            True if the record is at least as old as its retention window
        """
        return now - finished_at >= self.retention_for(status)
