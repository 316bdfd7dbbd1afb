"""
Error Handling Module

Defines domain exceptions and error categories for the watcher.
Domain exceptions are pure and have no external dependencies; each one
carries the ErrorCategory that ends up in a failed job's terminal record.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_DESCRIPTOR = "invalid_descriptor"
    DOWNLOAD_FAILED = "download_failed"
    DOWNLOAD_TIMEOUT = "download_timeout"
    NETWORK_ERROR = "network_error"
    KEY_UNAVAILABLE = "key_unavailable"
    DECRYPTION_FAILED = "decryption_failed"
    PLACEMENT_FAILED = "placement_failed"
    UPDATE_FAILED = "update_failed"
    INVALID_STATE = "invalid_state"
    SYSTEM_ERROR = "system_error"


# Operator-facing title and action copied into failed job records
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_DESCRIPTOR: {
        "title": "Invalid Job Descriptor",
        "message": "The job file is not a JSON object with a usable 'url' field.",
        "action": "Rewrite the job file with a valid descriptor.",
    },
    ErrorCategory.DOWNLOAD_FAILED: {
        "title": "Download Failed",
        "message": "The remote object store rejected the request or returned an error.",
        "action": "Check that the presigned URL has not expired and submit a new job.",
    },
    ErrorCategory.DOWNLOAD_TIMEOUT: {
        "title": "Download Timeout",
        "message": "The transfer did not complete within the configured time budget.",
        "action": "Check the instance's bandwidth or raise WATCHER_TRANSFER_TIMEOUT.",
    },
    ErrorCategory.NETWORK_ERROR: {
        "title": "Network Error",
        "message": "Unable to connect to the remote object store.",
        "action": "Check DNS and outbound connectivity from the instance.",
    },
    ErrorCategory.KEY_UNAVAILABLE: {
        "title": "Private Key Unavailable",
        "message": "The instance private key could not be loaded.",
        "action": "Verify the key file configured in WATCHER_PRIVATE_KEY_PATH.",
    },
    ErrorCategory.DECRYPTION_FAILED: {
        "title": "Decryption Failed",
        "message": "The payload key could not be unwrapped or the payload failed authentication.",
        "action": "Re-upload the file encrypted for this instance's public key.",
    },
    ErrorCategory.PLACEMENT_FAILED: {
        "title": "File Placement Failed",
        "message": "The downloaded file could not be written to its target directory.",
        "action": "Check permissions and free space on the target path.",
    },
    ErrorCategory.UPDATE_FAILED: {
        "title": "Update Failed",
        "message": "The agent update could not be downloaded or installed.",
        "action": "The next scheduled check will retry automatically.",
    },
    ErrorCategory.INVALID_STATE: {
        "title": "Invalid Job State",
        "message": "The job cannot move to the requested state.",
        "action": "Inspect the job record; no further transitions are possible.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing the job.",
        "action": "Check the watcher log for the full traceback.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class InvalidJobDescriptorError(DomainError):
    """Raised when a job file cannot be read or fails validation."""

    category = ErrorCategory.INVALID_DESCRIPTOR


class JobStateError(DomainError):
    """Raised when an invalid state transition is attempted."""

    category = ErrorCategory.INVALID_STATE


class DownloadError(DomainError):
    """
    Raised when a remote object cannot be retrieved.

    Covers non-2xx responses, DNS and connection failures and oversized
    bodies. The downloader never retries; callers decide what to do.
    """

    category = ErrorCategory.DOWNLOAD_FAILED

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code


class NetworkError(DownloadError):
    """Raised when the remote endpoint cannot be reached at all."""

    category = ErrorCategory.NETWORK_ERROR


class DownloadTimeoutError(DownloadError):
    """Raised when the connect timeout or the total transfer budget is exceeded."""

    category = ErrorCategory.DOWNLOAD_TIMEOUT


class DecryptionError(DomainError):
    """Base exception for hybrid decryption failures. Always fail-closed."""

    category = ErrorCategory.DECRYPTION_FAILED


class KeyUnavailableError(DecryptionError):
    """Raised when the instance private key is missing or unusable."""

    category = ErrorCategory.KEY_UNAVAILABLE


class KeyUnwrapError(DecryptionError):
    """Raised when the wrapped symmetric key cannot be recovered."""
    pass


class MalformedPayloadError(DecryptionError):
    """Raised when an encrypted blob does not match the wire format."""
    pass


class PayloadAuthenticationError(DecryptionError):
    """Raised when the AEAD tag does not verify."""
    pass


class PlacementError(DomainError):
    """Raised when the final artifact cannot be placed at its target path."""

    category = ErrorCategory.PLACEMENT_FAILED


class UpdateError(DomainError):
    """Raised when a self-update artifact cannot be fetched or installed."""

    category = ErrorCategory.UPDATE_FAILED


def categorize_error(exception: Exception) -> ErrorCategory:
    """
    Map an exception raised during job processing to an ErrorCategory.

    Domain errors carry their own category; anything else is a system error.
    """
    if isinstance(exception, DomainError):
        return exception.category
    return ErrorCategory.SYSTEM_ERROR


def describe_error(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the error section of a failed job record.

    Args:
        category: Error category
        technical_message: Technical error details

    Returns:
        Dictionary with error information
    """
    error_info = ERROR_MESSAGES.get(
        category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
    )
    return {
        "error": category.value,
        "title": error_info["title"],
        "message": error_info["message"],
        "action": error_info["action"],
        "detail": technical_message or "",
    }
