"""
Filesystem Job Repository Implementation

Concrete implementation of JobRepository backed by the watch directory.

Layout of the watch directory:
    <job>.json             pending descriptor written by the platform
    <job>.json.completed   terminal record, status "completed"
    <job>.json.failed      terminal record, status "failed"

Terminal records are JSON documents with an explicit "status" field. They
are written to a hidden temporary file, fsynced and renamed into place
before the pending descriptor is removed, so a job is never lost if the
process dies halfway through the transition.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List

from ..domain.errors import InvalidJobDescriptorError, JobStateError
from ..domain.job_management.entities import DESCRIPTOR_EXTENSION, DownloadJob
from ..domain.job_management.repositories import JobRepository
from ..domain.job_management.value_objects import JobStatus

logger = logging.getLogger(__name__)


class FileSystemJobRepository(JobRepository):
    """
    Watch-directory implementation of JobRepository.

    Attributes:
        watch_dir: Directory the platform drops job descriptors into
    """

    def __init__(self, watch_dir: str):
        """
        Initialize the repository, creating the watch directory if needed.

        Args:
            watch_dir: Directory to watch for job descriptors

        Raises:
            OSError: If the directory cannot be created
        """
        self.watch_dir = Path(watch_dir)
        self.watch_dir.mkdir(parents=True, exist_ok=True)

    def list_pending(self) -> Iterator[Path]:
        for path in self._sorted_matches(f"*{DESCRIPTOR_EXTENSION}"):
            yield path

    def load(self, job_path: Path) -> DownloadJob:
        """
        Read and validate a pending descriptor.

        Raises:
            FileNotFoundError: If the descriptor disappeared since listing
            InvalidJobDescriptorError: If it is unreadable, not JSON or invalid
        """
        job_path = Path(job_path)
        try:
            raw = job_path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise InvalidJobDescriptorError(f"Cannot read job file {job_path.name}: {e}", e)

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidJobDescriptorError(f"Job file {job_path.name} is not valid JSON: {e}", e)

        return DownloadJob.from_descriptor(job_path, data)

    def mark_terminal(self, job: DownloadJob) -> Path:
        if not job.status.is_terminal():
            raise JobStateError(
                f"Cannot record job {job.job_id} in {job.status.value} state"
            )

        source = Path(job.source_path)
        record_path = self.record_path_for(source, job.status)

        if not source.exists() and record_path.exists():
            logger.debug(f"Job {job.job_id} already recorded as {job.status.value}")
            return record_path

        payload = json.dumps(job.to_record(), indent=2, sort_keys=True).encode("utf-8")
        self._write_atomically(record_path, payload)

        # A reprocessed job may have left a record with the other status
        for status in JobStatus.terminal_statuses():
            if status != job.status:
                stale = self.record_path_for(source, status)
                try:
                    stale.unlink()
                    logger.info(f"Replaced stale {status.value} record for job {job.job_id}")
                except FileNotFoundError:
                    pass

        try:
            source.unlink()
        except FileNotFoundError:
            pass

        return record_path

    def list_terminal(self, status: JobStatus) -> List[Path]:
        return list(self._sorted_matches(f"*{DESCRIPTOR_EXTENSION}{status.suffix}"))

    def get_finished_at(self, record_path: Path) -> datetime:
        """
        Read finished_at from a terminal record.

        Falls back to the file's modification time for records that are not
        JSON, such as descriptors renamed by older watcher versions.

        Raises:
            OSError: If the record cannot be read or stat'ed
        """
        record_path = Path(record_path)
        try:
            data = json.loads(record_path.read_bytes().decode("utf-8"))
            finished_at = datetime.fromisoformat(data["finished_at"])
        except (UnicodeDecodeError, ValueError, KeyError, TypeError):
            mtime = record_path.stat().st_mtime
            return datetime.fromtimestamp(mtime, tz=timezone.utc)

        if finished_at.tzinfo is None:
            finished_at = finished_at.replace(tzinfo=timezone.utc)
        return finished_at

    def delete(self, record_path: Path) -> bool:
        try:
            Path(record_path).unlink()
        except FileNotFoundError:
            pass
        return True

    @staticmethod
    def record_path_for(source: Path, status: JobStatus) -> Path:
        """Terminal record path for a descriptor and terminal status."""
        source = Path(source)
        return source.with_name(source.name + status.suffix)

    def _sorted_matches(self, pattern: str) -> Iterator[Path]:
        # Hidden entries are in-flight temporaries (ours or the platform's)
        for path in sorted(self.watch_dir.glob(pattern), key=lambda p: p.name):
            if path.name.startswith("."):
                continue
            if path.is_file():
                yield path

    def _write_atomically(self, destination: Path, payload: bytes) -> None:
        tmp_path = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, destination)
        except OSError:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
            raise
