"""
Local File Storage Repository Implementation

Concrete implementation of IFileStorageRepository for local filesystem operations.
This implementation uses os, shutil, and pathlib to manage per-job scratch
directories and to place finished files atomically.
"""

import logging
import os
import shutil
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO

from ..domain.errors import PlacementError
from ..domain.file_storage.storage_repository import IFileStorageRepository

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalFileStorageRepository(IFileStorageRepository):
    """
    Local filesystem implementation of IFileStorageRepository.

    Final files are written to a hidden temporary file inside the target
    directory, fsynced, given their permission bits and then renamed over
    the final name. The rename stays on one filesystem, so readers see
    either the previous file or the complete new one.

    Attributes:
        scratch_dir: Base directory for per-job scratch areas
    """

    def __init__(self, scratch_dir: str):
        """
        Initialize the local file storage repository.

        Args:
            scratch_dir: Base directory for scratch areas
        """
        self.scratch_dir = Path(scratch_dir)
        self._ensure_scratch_directory()

    def _ensure_scratch_directory(self) -> None:
        """
        Ensure the scratch directory exists.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create scratch directory: {self.scratch_dir}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create scratch directory: {self.scratch_dir}"
            ) from e

    def create_scratch(self, job_id: str) -> Path:
        scratch_path = self.scratch_dir / f"{job_id}-{uuid.uuid4().hex}"
        try:
            scratch_path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise PlacementError(f"Failed to create scratch directory {scratch_path}: {e}", e)
        return scratch_path

    def purge_scratch(self, scratch_path: Path) -> bool:
        scratch_path = Path(scratch_path)
        if not scratch_path.exists():
            return True

        try:
            if scratch_path.is_dir():
                shutil.rmtree(scratch_path)
            else:
                scratch_path.unlink()
            return True
        except OSError as e:
            logger.warning(f"Failed to purge scratch area {scratch_path}: {e}")
            return False

    def save(
        self,
        target_dir: Path,
        filename: str,
        content: BinaryIO,
        mode: int = 0o644,
    ) -> Path:
        """
        Atomically place content at target_dir/filename.

        Raises:
            PlacementError: If the directory or file cannot be written
        """
        if not filename or not filename.strip():
            raise PlacementError("filename cannot be empty")

        target_dir = Path(target_dir)
        final_path = target_dir / filename
        tmp_path = target_dir / f".{filename}.{uuid.uuid4().hex}.partial"

        try:
            target_dir.mkdir(parents=True, exist_ok=True)

            with open(tmp_path, "wb") as f:
                # Read and write in chunks for memory efficiency
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                f.flush()
                os.fsync(f.fileno())

            os.chmod(tmp_path, mode)
            os.replace(tmp_path, final_path)
        except OSError as e:
            self._discard(tmp_path)
            raise PlacementError(f"Failed to place file at {final_path}: {e}", e)

        return final_path

    def cleanup_orphaned_scratch(self, max_age: timedelta, now: datetime) -> int:
        """
        Remove scratch entries older than max_age.

        Returns:
            Number of items cleaned up
        """
        count = 0

        if not self.scratch_dir.exists():
            return count

        for item in self.scratch_dir.iterdir():
            try:
                modified_at = datetime.fromtimestamp(item.stat().st_mtime, tz=timezone.utc)
                if now - modified_at < max_age:
                    continue

                if item.is_dir():
                    shutil.rmtree(item)
                else:
                    item.unlink()
                count += 1
                logger.info(f"Removed orphaned scratch entry: {item}")

            except OSError as e:
                logger.warning(f"Failed to remove orphaned item {item}: {e}")

        return count

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {path}: {e}")
