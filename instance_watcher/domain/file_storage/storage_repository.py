"""
File Storage Repository Interface

Abstract interface for physical file operations on the instance: per-job
scratch areas and atomic placement of finished artifacts.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import BinaryIO


class IFileStorageRepository(ABC):
    """
    Unified interface for file storage operations.

    Contract Guarantees:
    - save() never exposes a partially written file at the final path
    - purge_scratch() is idempotent
    - scratch areas are unique per call, even for the same job id
    """

    @abstractmethod
    def create_scratch(self, job_id: str) -> Path:
        """
        Allocate a fresh, empty scratch directory for one job.

        Args:
            job_id: Job identifier, used as a readable name prefix

        Returns:
            Path of the new directory

        Raises:
            PlacementError: If the directory cannot be created
        """
        pass  # pragma: no cover

    @abstractmethod
    def purge_scratch(self, scratch_path: Path) -> bool:
        """
        Remove a scratch directory and everything in it.

        Args:
            scratch_path: Directory returned by create_scratch()

        Returns:
            True if removed or already absent, False on failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def save(
        self,
        target_dir: Path,
        filename: str,
        content: BinaryIO,
        mode: int = 0o644,
    ) -> Path:
        """
        Atomically place content at target_dir/filename.

        Creates target_dir if needed and overwrites an existing file.

        Args:
            target_dir: Destination directory
            filename: Bare destination file name
            content: Binary content stream
            mode: Permission bits applied before the file becomes visible

        Returns:
            Path of the placed file

        Raises:
            PlacementError: If the file cannot be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def cleanup_orphaned_scratch(self, max_age: timedelta, now: datetime) -> int:
        """
        Remove scratch entries left behind by interrupted runs.

        Args:
            max_age: Minimum age of an entry before it is removed
            now: Reference time (timezone-aware UTC)

        Returns:
            Number of entries removed
        """
        pass  # pragma: no cover
