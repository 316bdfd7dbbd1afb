"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging) from core job processing.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (job_id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class JobStartedEvent(DomainEvent):
    """
    Event emitted when a download job starts processing.

    Attributes:
        url: Source URL being downloaded
        encrypted: Whether the payload will be decrypted
    """
    url: str
    encrypted: bool


@dataclass(frozen=True)
class JobCompletedEvent(DomainEvent):
    """
    Event emitted when a job's file has been placed at its target path.

    Attributes:
        final_path: Absolute path of the placed file
    """
    final_path: str


@dataclass(frozen=True)
class JobFailedEvent(DomainEvent):
    """
    Event emitted when a job reaches the failed state.

    Attributes:
        error_message: Technical description of the failure
        error_category: ErrorCategory value
    """
    error_message: str
    error_category: str

