"""
Job Processor

Application service that drives one download job from its pending
descriptor to a terminal record.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from ..domain.encryption.decryptor import IPayloadDecryptor
from ..domain.errors import (
    ErrorCategory,
    InvalidJobDescriptorError,
    PlacementError,
    categorize_error,
    describe_error,
)
from ..domain.events import DomainEvent
from ..domain.file_storage.storage_repository import IFileStorageRepository
from ..domain.job_management.entities import DownloadJob
from ..domain.job_management.services import JobManager
from ..domain.transfer.downloader import IDownloader
from ..domain.transfer.value_objects import DownloadTimeouts, redact_url
from .event_publisher import EventPublisher
from .processing_result import ProcessingResult

logger = logging.getLogger(__name__)

DOWNLOAD_FILE_NAME = "payload"
PLACED_FILE_MODE = 0o644


class JobProcessor:
    """
    Application service orchestrating the job pipeline.

    Workflow:
    1. Load and validate the descriptor
    2. Start the job and publish JobStartedEvent
    3. Download into a per-job scratch directory
    4. Decrypt when the job is encrypted and carries a wrapped key
    5. Place the result atomically in the target directory
    6. Complete the job and publish JobCompletedEvent
    7. On error: categorize, fail the job, publish JobFailedEvent

    The scratch directory is purged whatever the outcome. process() never
    raises; failures are reported through the ProcessingResult.
    """

    def __init__(
        self,
        job_manager: JobManager,
        downloader: IDownloader,
        decryptor: IPayloadDecryptor,
        storage: IFileStorageRepository,
        event_publisher: Optional[EventPublisher] = None,
        download_dir: Path = Path("/home/ubuntu/downloads"),
        timeouts: Optional[DownloadTimeouts] = None,
    ):
        """
        Initialize Job Processor with dependencies.

        Args:
            job_manager: Domain service for job lifecycle management
            downloader: Transfer adapter for presigned URLs
            decryptor: Hybrid payload decryptor
            storage: Scratch and placement repository
            event_publisher: Publisher for job lifecycle events
            download_dir: Target directory for jobs without targetPath
            timeouts: Transfer time budget per job
        """
        self.job_manager = job_manager
        self.downloader = downloader
        self.decryptor = decryptor
        self.storage = storage
        self.event_publisher = event_publisher or EventPublisher()
        self.download_dir = Path(download_dir)
        self.timeouts = timeouts or DownloadTimeouts()

    def process(self, job_path: Path) -> ProcessingResult:
        """
        Process one pending job file.

        Args:
            job_path: Path of the descriptor in the watch directory

        Returns:
            ProcessingResult with success/failure information
        """
        job_path = Path(job_path)

        try:
            job = self.job_manager.load_job(job_path)
        except FileNotFoundError:
            logger.info(f"Job file {job_path.name} disappeared before processing")
            return ProcessingResult(
                success=False,
                job_id=job_path.stem,
                error_message="Job file disappeared before processing",
                error_type=ErrorCategory.SYSTEM_ERROR.value,
                recorded=False,
            )
        except InvalidJobDescriptorError as e:
            logger.error(f"Rejecting job file {job_path.name}: {e}")
            return self._fail(DownloadJob.unreadable(job_path), e)
        except Exception as e:
            logger.error(f"Unexpected error loading job file {job_path.name}: {e}", exc_info=True)
            return self._fail(DownloadJob.unreadable(job_path), e)

        return self._run(job)

    def _run(self, job: DownloadJob) -> ProcessingResult:
        scratch_dir = None
        try:
            self._publish(job.start())

            target_dir = job.resolve_target_dir(self.download_dir)
            filename = job.resolve_filename()
            self._ensure_target_dir(target_dir)

            scratch_dir = self.storage.create_scratch(job.job_id)
            downloaded = scratch_dir / DOWNLOAD_FILE_NAME

            logger.info(f"Downloading job {job.job_id} from {redact_url(job.url)}")
            size = self.downloader.fetch_to_file(job.url, downloaded, self.timeouts)
            logger.info(f"Downloaded {size} bytes for job {job.job_id}")

            final_path = self._place(job, downloaded, target_dir, filename)

        except Exception as e:
            return self._fail(job, e)
        finally:
            if scratch_dir is not None:
                self.storage.purge_scratch(scratch_dir)

        try:
            event = self.job_manager.complete_job(job, str(final_path))
        except Exception as e:
            logger.error(
                f"Job {job.job_id} placed at {final_path} but its record could not be "
                f"written, leaving it pending: {e}",
                exc_info=True,
            )
            return ProcessingResult(
                success=True,
                job_id=job.job_id,
                final_path=str(final_path),
                recorded=False,
            )

        self._publish(event)
        return ProcessingResult(success=True, job_id=job.job_id, final_path=str(final_path))

    def _place(self, job: DownloadJob, downloaded: Path, target_dir: Path, filename: str) -> Path:
        if job.requires_decryption:
            logger.info(f"Decrypting payload for job {job.job_id}")
            plaintext = self.decryptor.decrypt(job.encryption_key, downloaded.read_bytes())
            return self.storage.save(target_dir, filename, BytesIO(plaintext), PLACED_FILE_MODE)

        if job.encrypted:
            logger.warning(
                f"Job {job.job_id} is marked encrypted but has no encryption key, "
                f"placing the file as downloaded"
            )

        with open(downloaded, "rb") as content:
            return self.storage.save(target_dir, filename, content, PLACED_FILE_MODE)

    @staticmethod
    def _ensure_target_dir(target_dir: Path) -> None:
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PlacementError(f"Cannot create target directory {target_dir}: {e}", e)

    def _fail(self, job: DownloadJob, error: Exception) -> ProcessingResult:
        """
        Fail the job, write its terminal record and publish JobFailedEvent.

        Args:
            job: Job being processed
            error: Exception that occurred

        Returns:
            ProcessingResult with error information
        """
        category = categorize_error(error)
        error_info = describe_error(category, str(error))
        error_message = str(error) or error_info["message"]

        if category == ErrorCategory.SYSTEM_ERROR:
            logger.error(f"Job {job.job_id} failed unexpectedly: {error}", exc_info=True)
        else:
            logger.error(f"Job {job.job_id} failed ({error_info['title']}): {error_message}")

        try:
            event = self.job_manager.fail_job(job, error_message, category.value)
        except Exception as e:
            logger.error(
                f"Could not record failure of job {job.job_id}, leaving it pending: {e}",
                exc_info=True,
            )
            return ProcessingResult(
                success=False,
                job_id=job.job_id,
                error_message=error_message,
                error_type=category.value,
                recorded=False,
            )

        self._publish(event)
        return ProcessingResult(
            success=False,
            job_id=job.job_id,
            error_message=error_message,
            error_type=category.value,
        )

    def _publish(self, event: Optional[DomainEvent]) -> None:
        if event is not None:
            self.event_publisher.publish(event)
