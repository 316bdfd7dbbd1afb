"""
Dependency Injection Container

Holds the agent's wired services so the CLI and the scheduler resolve the
same instances.
"""

import logging
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

JOB_EVENT_LOGGER = "instance_watcher.jobs"


class DependencyNotFoundError(Exception):
    """Raised when a service was never registered with the agent."""
    pass


class DependencyContainer:
    """
    Registry of the agent's services, keyed by the interface they provide.

    Every service is a single shared instance built by create_agent().
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        self._services[interface] = implementation
        logger.debug(f"Registered {interface.__name__}: {type(implementation).__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Look up the instance registered for an interface.

        Raises:
            DependencyNotFoundError: If create_agent() registered nothing for it
        """
        try:
            return self._services[interface]
        except KeyError:
            raise DependencyNotFoundError(
                f"No {interface.__name__} registered with the agent"
            ) from None

    def is_registered(self, interface: Type) -> bool:
        return interface in self._services

    def setup_event_handlers(self, event_publisher) -> None:
        """
        Subscribe the job event log to every domain event.

        Args:
            event_publisher: EventPublisher the job processor publishes to
        """
        from ..domain.events import DomainEvent
        from ..infrastructure.event_handlers.logging_handler import LoggingEventHandler

        handler = LoggingEventHandler(logging.getLogger(JOB_EVENT_LOGGER))
        event_publisher.subscribe(DomainEvent, handler.handle)
        logger.debug(f"Job events are logged to {JOB_EVENT_LOGGER}")
