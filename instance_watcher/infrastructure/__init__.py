"""Infrastructure layer: filesystem, HTTP and cryptography adapters."""

from .filesystem_job_repository import FileSystemJobRepository
from .http_downloader import HttpDownloader
from .hybrid_decryptor import HybridDecryptor
from .local_file_storage_repository import LocalFileStorageRepository

__all__ = [
    'FileSystemJobRepository',
    'HttpDownloader',
    'HybridDecryptor',
    'LocalFileStorageRepository',
]
