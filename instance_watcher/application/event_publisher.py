"""
Event Publisher

Application service for publishing domain events to registered handlers.
Enables decoupling of side effects from core job processing.
"""

import logging
from typing import Callable, Dict, List, Type

from ..domain.events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Event publisher that dispatches domain events to registered handlers.

    Dispatches events synchronously, in registration order. Handler
    exceptions are caught and logged so a broken side effect never changes
    a job's outcome. Handlers registered for a base class also receive
    events of its subclasses.
    """

    def __init__(self):
        """Initialize EventPublisher with empty handler registry."""
        self._handlers: Dict[Type[DomainEvent], List[Callable[[DomainEvent], None]]] = {}

    def subscribe(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """
        Register a handler for a specific event type.

        Args:
            event_type: The type of domain event to handle
            handler: Callable that accepts the event as parameter

        Example:
            publisher = EventPublisher()
            publisher.subscribe(JobCompletedEvent, handle_job_completed)
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            f"Registered handler {getattr(handler, '__name__', repr(handler))} "
            f"for {event_type.__name__}"
        )

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all registered handlers.

        Args:
            event: The domain event to publish
        """
        event_type = type(event)
        handlers = [
            handler
            for registered_type, registered in self._handlers.items()
            if isinstance(event, registered_type)
            for handler in registered
        ]

        if not handlers:
            logger.debug(f"No handlers registered for {event_type.__name__}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Log but don't fail - side effects should not break core logic
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', repr(handler))} "
                    f"for {event_type.__name__}: {e}",
                    exc_info=True
                )

    def clear(self) -> None:
        """Remove all registered handlers."""
        self._handlers.clear()
