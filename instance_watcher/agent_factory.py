"""
Agent Factory

Creates the watcher's services from configuration and wires them into a
DependencyContainer. The factory keeps construction out of the CLI so tests
can build an agent around temporary directories.
"""

import logging
from pathlib import Path
from typing import Optional

from . import __version__
from .application.dependency_container import DependencyContainer
from .application.event_publisher import EventPublisher
from .application.job_processor import JobProcessor
from .application.scheduler import Scheduler
from .application.self_updater import SelfUpdater
from .config.watcher_config import WatcherConfig
from .domain.encryption.decryptor import IPayloadDecryptor
from .domain.file_storage.storage_repository import IFileStorageRepository
from .domain.job_management import JobManager, RetentionPolicy
from .domain.job_management.repositories import JobRepository
from .domain.transfer.downloader import IDownloader
from .domain.transfer.value_objects import DownloadTimeouts
from .infrastructure.filesystem_job_repository import FileSystemJobRepository
from .infrastructure.http_downloader import HttpDownloader
from .infrastructure.hybrid_decryptor import HybridDecryptor
from .infrastructure.local_file_storage_repository import LocalFileStorageRepository

logger = logging.getLogger(__name__)


def create_agent(
    config: Optional[WatcherConfig] = None,
    downloader: Optional[IDownloader] = None,
) -> DependencyContainer:
    """
    Create and wire the watcher's services.

    Args:
        config: Watcher configuration, uses default if None
        downloader: Transfer adapter override, an HttpDownloader if None

    Returns:
        DependencyContainer with every service registered as a singleton

    Raises:
        OSError: If the watch or scratch directory cannot be created
        ValueError: If the configured timeouts are inconsistent
    """
    if config is None:
        config = WatcherConfig()

    container = DependencyContainer()
    container.register_singleton(WatcherConfig, config)

    _initialize_infrastructure(container, config, downloader)
    _initialize_services(container, config)

    logger.debug(
        f"Agent wired: watch_dir={config.watch_dir}, download_dir={config.download_dir}, "
        f"self_update={'on' if config.self_update_enabled else 'off'}"
    )
    return container


def _initialize_infrastructure(
    container: DependencyContainer,
    config: WatcherConfig,
    downloader: Optional[IDownloader],
) -> None:
    """
    Initialize infrastructure adapters (filesystem, HTTP, cryptography).

    Args:
        container: Container to register adapters in
        config: Watcher configuration
        downloader: Optional transfer adapter override
    """
    timeouts = DownloadTimeouts(
        connect=config.connect_timeout,
        total=config.transfer_timeout,
        stall=config.stall_timeout,
    )
    container.register_singleton(DownloadTimeouts, timeouts)

    job_repository = FileSystemJobRepository(config.watch_dir)
    storage_repository = LocalFileStorageRepository(config.scratch_dir)
    decryptor = HybridDecryptor(
        private_key_path=config.private_key_path,
        passphrase=config.private_key_passphrase,
    )
    if downloader is None:
        downloader = HttpDownloader(default_timeouts=timeouts)

    container.register_singleton(JobRepository, job_repository)
    container.register_singleton(IFileStorageRepository, storage_repository)
    container.register_singleton(IPayloadDecryptor, decryptor)
    container.register_singleton(IDownloader, downloader)


def _initialize_services(container: DependencyContainer, config: WatcherConfig) -> None:
    """
    Initialize domain and application services.

    Args:
        container: Container holding the infrastructure adapters
        config: Watcher configuration
    """
    job_manager = JobManager(
        container.resolve(JobRepository),
        RetentionPolicy(completed=config.completed_retention, failed=config.failed_retention),
    )
    container.register_singleton(JobManager, job_manager)

    event_publisher = EventPublisher()
    container.setup_event_handlers(event_publisher)
    container.register_singleton(EventPublisher, event_publisher)

    processor = JobProcessor(
        job_manager=job_manager,
        downloader=container.resolve(IDownloader),
        decryptor=container.resolve(IPayloadDecryptor),
        storage=container.resolve(IFileStorageRepository),
        event_publisher=event_publisher,
        download_dir=Path(config.download_dir),
        timeouts=container.resolve(DownloadTimeouts),
    )
    container.register_singleton(JobProcessor, processor)

    updater = SelfUpdater(
        downloader=container.resolve(IDownloader),
        current_version=__version__,
        version_url=config.version_url,
        artifact_url=config.artifact_url,
        install_path=Path(config.install_path),
        marker=config.update_marker,
        timeouts=container.resolve(DownloadTimeouts),
    )
    container.register_singleton(SelfUpdater, updater)

    scheduler = Scheduler(
        job_manager=job_manager,
        processor=processor,
        storage=container.resolve(IFileStorageRepository),
        updater=updater if updater.enabled else None,
        poll_interval=config.check_interval,
        update_interval=config.update_check_interval,
    )
    container.register_singleton(Scheduler, scheduler)
