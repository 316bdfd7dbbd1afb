"""
Process Task

Scheduler task that processes every pending job in the watch directory.
Thin wrapper that delegates to the JobProcessor application service.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from ..domain.job_management.services import JobManager

if TYPE_CHECKING:
    from ..application.job_processor import JobProcessor

logger = logging.getLogger(__name__)


def process_pending_jobs(
    job_manager: JobManager,
    processor: "JobProcessor",
    should_stop: Optional[Callable[[], bool]] = None,
) -> dict:
    """
    Process pending jobs serially in listing order.

    Stops before the next job once should_stop() returns True; a job that
    has started is always allowed to finish.

    Args:
        job_manager: Domain service listing pending jobs
        processor: Application service processing one job
        should_stop: Optional shutdown probe

    Returns:
        dict: Processing statistics with counts and errors
    """
    stats = {
        "jobs_processed": 0,
        "jobs_completed": 0,
        "jobs_failed": 0,
        "errors": [],
    }

    try:
        for job_path in job_manager.list_pending():
            if should_stop is not None and should_stop():
                logger.info("Shutdown requested, leaving remaining jobs pending")
                break

            result = processor.process(job_path)
            stats["jobs_processed"] += 1
            if result.success:
                stats["jobs_completed"] += 1
            else:
                stats["jobs_failed"] += 1
            if not result.recorded:
                stats["errors"].append(
                    f"{result.job_id}: {result.error_message or 'terminal record not written'}"
                )

    except OSError as e:
        error_msg = f"Error listing pending jobs: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    if stats["jobs_processed"]:
        logger.info(
            f"Processed {stats['jobs_processed']} jobs: "
            f"{stats['jobs_completed']} completed, {stats['jobs_failed']} failed"
        )

    return stats
