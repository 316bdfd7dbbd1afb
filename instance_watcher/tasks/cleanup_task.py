"""
Cleanup Task

Scheduler task for periodic cleanup of expired job records and scratch files.
Thin wrapper that delegates to domain services and the storage repository.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..domain.file_storage.storage_repository import IFileStorageRepository
from ..domain.job_management.entities import utc_now
from ..domain.job_management.services import JobManager

logger = logging.getLogger(__name__)

ORPHANED_SCRATCH_MAX_AGE = timedelta(hours=1)


def cleanup_expired_jobs(
    job_manager: JobManager,
    storage: IFileStorageRepository,
    now: Optional[datetime] = None,
) -> dict:
    """
    Periodic cleanup task that removes expired job records and orphaned scratch.

    This task runs once per scheduler tick and:
    1. Removes terminal records past their retention window through JobManager
    2. Removes scratch entries left behind by interrupted runs
    3. Logs cleanup activities

    Args:
        job_manager: Domain service owning record retention
        storage: Repository owning the scratch area
        now: Reference time, defaults to the current UTC time

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    now = now or utc_now()

    cleanup_stats = {
        "expired_jobs_removed": 0,
        "orphaned_files_cleaned": 0,
        "errors": [],
    }

    # 1. Clean up expired job records
    try:
        report = job_manager.garbage_collect(now)
        cleanup_stats["expired_jobs_removed"] = report.removed_count
        cleanup_stats["errors"].extend(report.errors)
    except Exception as e:
        error_msg = f"Error cleaning up expired jobs: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    # 2. Clean up orphaned scratch entries
    try:
        cleanup_stats["orphaned_files_cleaned"] = storage.cleanup_orphaned_scratch(
            ORPHANED_SCRATCH_MAX_AGE, now
        )
    except Exception as e:
        error_msg = f"Error cleaning up orphaned files: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    if cleanup_stats["expired_jobs_removed"] or cleanup_stats["orphaned_files_cleaned"]:
        logger.info(
            f"Cleanup completed: {cleanup_stats['expired_jobs_removed']} job records, "
            f"{cleanup_stats['orphaned_files_cleaned']} orphaned files removed"
        )

    if cleanup_stats["errors"]:
        logger.warning(f"Cleanup completed with {len(cleanup_stats['errors'])} errors")

    return cleanup_stats
