"""
File Storage Domain

Scratch space for in-flight jobs and atomic placement of finished files.
"""

from .storage_repository import IFileStorageRepository

__all__ = [
    "IFileStorageRepository",
]
