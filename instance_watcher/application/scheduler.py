"""
Scheduler

The agent's control loop: periodic update checks, serial job processing and
record cleanup, with graceful shutdown on SIGTERM/SIGINT.
"""

import logging
import signal
import threading
import time
from typing import Callable, Optional

from ..domain.file_storage.storage_repository import IFileStorageRepository
from ..domain.job_management.services import JobManager
from ..tasks.cleanup_task import cleanup_expired_jobs
from ..tasks.process_task import process_pending_jobs
from .job_processor import JobProcessor
from .self_updater import SelfUpdater, UpdateResult

logger = logging.getLogger(__name__)

EXIT_CODE_OK = 0
EXIT_CODE_RESTART = 75

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_UPDATE_INTERVAL = 3600.0


class Scheduler:
    """
    Single-threaded control loop of the agent.

    Each tick:
    1. Runs the self-updater when its interval has elapsed (first tick included)
    2. Processes pending jobs one at a time
    3. Cleans up expired job records and orphaned scratch files

    A stop request is honoured between jobs and between ticks; a download in
    progress is never interrupted. After an update is applied the loop stops
    and run() returns EXIT_CODE_RESTART so the supervisor starts the new
    executable.
    """

    def __init__(
        self,
        job_manager: JobManager,
        processor: JobProcessor,
        storage: IFileStorageRepository,
        updater: Optional[SelfUpdater] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the scheduler.

        Args:
            job_manager: Domain service for pending jobs and retention
            processor: Application service processing one job
            storage: Repository owning the scratch area
            updater: Optional self-updater
            poll_interval: Seconds to sleep between ticks
            update_interval: Minimum seconds between update checks
            clock: Monotonic clock, injectable for tests
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if update_interval <= 0:
            raise ValueError("update_interval must be positive")

        self.job_manager = job_manager
        self.processor = processor
        self.storage = storage
        self.updater = updater
        self.poll_interval = poll_interval
        self.update_interval = update_interval
        self._clock = clock
        self._stop_event = threading.Event()
        self._last_update_check: Optional[float] = None
        self.restart_requested = False

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request the loop to exit after the current job."""
        self._stop_event.set()

    def tick(self) -> dict:
        """
        Run one scheduler iteration.

        Returns:
            dict: Statistics of the update check, processing and cleanup steps
        """
        stats = {"update": None, "processing": None, "cleanup": None}

        if self._update_due():
            result = self._check_for_update()
            stats["update"] = result.outcome.value
            if result.restart_required:
                self.restart_requested = True
                self.stop()
                return stats

        stats["processing"] = process_pending_jobs(
            self.job_manager, self.processor, should_stop=self._stop_event.is_set
        )
        stats["cleanup"] = cleanup_expired_jobs(self.job_manager, self.storage)
        return stats

    def run_once(self) -> int:
        """
        Run a single tick.

        Returns:
            Process exit code
        """
        self.tick()
        return self.exit_code

    def run(self, install_signal_handlers: bool = True) -> int:
        """
        Run ticks until stopped.

        Args:
            install_signal_handlers: Route SIGTERM and SIGINT to stop()

        Returns:
            EXIT_CODE_RESTART after an applied update, EXIT_CODE_OK otherwise
        """
        previous_handlers = {}
        if install_signal_handlers:
            for signum in (signal.SIGTERM, signal.SIGINT):
                previous_handlers[signum] = signal.signal(signum, self._handle_signal)

        logger.info(
            f"Scheduler started: poll every {self.poll_interval:g}s, "
            f"update check every {self.update_interval:g}s"
        )

        try:
            while not self._stop_event.is_set():
                try:
                    self.tick()
                except Exception as e:
                    logger.error(f"Scheduler tick failed: {e}", exc_info=True)

                if self._stop_event.wait(self.poll_interval):
                    break
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

        logger.info(f"Scheduler stopped with exit code {self.exit_code}")
        return self.exit_code

    @property
    def exit_code(self) -> int:
        return EXIT_CODE_RESTART if self.restart_requested else EXIT_CODE_OK

    def _update_due(self) -> bool:
        if self.updater is None:
            return False
        if self._last_update_check is None:
            return True
        return self._clock() - self._last_update_check >= self.update_interval

    def _check_for_update(self) -> UpdateResult:
        self._last_update_check = self._clock()
        result = self.updater.check_and_apply()
        logger.debug(f"Update check: {result.outcome.value} {result.message}")
        return result

    def _handle_signal(self, signum, frame) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down")
        self.stop()
