"""
Job Management Domain

Manages download job descriptors, their terminal records and retention.
"""

from .entities import DownloadJob
from .value_objects import JobStatus, RetentionPolicy
from .services import GarbageCollectionReport, JobManager
from .repositories import JobRepository
from ..errors import InvalidJobDescriptorError, JobStateError

__all__ = [
    'DownloadJob',
    'JobStatus',
    'RetentionPolicy',
    'JobManager',
    'GarbageCollectionReport',
    'JobRepository',
    'InvalidJobDescriptorError',
    'JobStateError',
]
