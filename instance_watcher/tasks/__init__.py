"""
Scheduler Tasks

Periodic units of work run on every scheduler tick.
"""

from .cleanup_task import cleanup_expired_jobs
from .process_task import process_pending_jobs

__all__ = [
    "cleanup_expired_jobs",
    "process_pending_jobs",
]
