"""
Application Layer

Orchestrates domain services and infrastructure adapters: job processing,
self-update and the scheduler loop.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .job_processor import JobProcessor
from .processing_result import ProcessingResult
from .scheduler import EXIT_CODE_OK, EXIT_CODE_RESTART, Scheduler
from .self_updater import SelfUpdater, UpdateOutcome, UpdateResult

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'EventPublisher',
    'JobProcessor',
    'ProcessingResult',
    'Scheduler',
    'SelfUpdater',
    'UpdateOutcome',
    'UpdateResult',
    'EXIT_CODE_OK',
    'EXIT_CODE_RESTART',
]
