"""
Job Management Repositories

Repository interface for job persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterator, List

from .entities import DownloadJob
from .value_objects import JobStatus


class JobRepository(ABC):
    """
    Abstract repository interface for job descriptors and terminal records.

    A job's state is determined solely by what exists on disk: a pending
    descriptor, or a terminal record carrying an explicit status.
    """

    @abstractmethod
    def list_pending(self) -> Iterator[Path]:
        """
        Lazily list descriptors eligible for processing.

        Returns:
            Iterator of descriptor paths in a deterministic, stable order
        """
        pass  # pragma: no cover

    @abstractmethod
    def load(self, job_path: Path) -> DownloadJob:
        """
        Read and validate a pending descriptor.

        Args:
            job_path: Path returned by list_pending()

        Returns:
            DownloadJob in PENDING state

        Raises:
            InvalidJobDescriptorError: If the descriptor is unreadable or invalid
        """
        pass  # pragma: no cover

    @abstractmethod
    def mark_terminal(self, job: DownloadJob) -> Path:
        """
        Persist a job's terminal state and retire its pending descriptor.

        Must be idempotent and must never leave the job without either a
        pending descriptor or a terminal record.

        Args:
            job: Job in COMPLETED or FAILED state

        Returns:
            Path of the terminal record

        Raises:
            JobStateError: If the job is not in a terminal state
            OSError: If the record cannot be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_terminal(self, status: JobStatus) -> List[Path]:
        """
        List terminal records with the given status.

        Args:
            status: COMPLETED or FAILED

        Returns:
            Record paths sorted by name
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_finished_at(self, record_path: Path) -> datetime:
        """
        Return when the job behind a terminal record finished.

        Args:
            record_path: Terminal record path

        Returns:
            Timezone-aware UTC datetime
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, record_path: Path) -> bool:
        """
        Delete a terminal record.

        Args:
            record_path: Terminal record path

        Returns:
            True if deleted or already absent

        Raises:
            OSError: If the record exists but cannot be removed
        """
        pass  # pragma: no cover
