"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from ...domain.events import (
    DomainEvent,
    JobCompletedEvent,
    JobFailedEvent,
    JobStartedEvent,
)
from ...domain.transfer.value_objects import redact_url


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and writes one human-readable line per
    job transition to the watcher log.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, JobStartedEvent):
                self._handle_job_started(event)
            elif isinstance(event, JobCompletedEvent):
                self._handle_job_completed(event)
            elif isinstance(event, JobFailedEvent):
                self._handle_job_failed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_job_started(self, event: JobStartedEvent) -> None:
        """Log job start."""
        self.logger.info(
            f"Job started: job_id={event.aggregate_id}, "
            f"url={redact_url(event.url)}, encrypted={event.encrypted}"
        )

    def _handle_job_completed(self, event: JobCompletedEvent) -> None:
        """Log job completion."""
        self.logger.info(
            f"Job completed: job_id={event.aggregate_id}, final_path={event.final_path}"
        )

    def _handle_job_failed(self, event: JobFailedEvent) -> None:
        """Log job failure."""
        self.logger.warning(
            f"Job failed: job_id={event.aggregate_id}, "
            f"error={event.error_message}, category={event.error_category}"
        )
