"""
Unit tests for domain errors and error categorization.
"""

import pytest

from instance_watcher.domain.errors import (
    ERROR_MESSAGES,
    DecryptionError,
    DomainError,
    DownloadError,
    DownloadTimeoutError,
    ErrorCategory,
    InvalidJobDescriptorError,
    JobStateError,
    KeyUnavailableError,
    KeyUnwrapError,
    MalformedPayloadError,
    NetworkError,
    PayloadAuthenticationError,
    PlacementError,
    UpdateError,
    categorize_error,
    describe_error,
)


class TestCategorizeError:

    @pytest.mark.parametrize("error,category", [
        (InvalidJobDescriptorError("x"), ErrorCategory.INVALID_DESCRIPTOR),
        (DownloadError("x", status_code=403), ErrorCategory.DOWNLOAD_FAILED),
        (NetworkError("x"), ErrorCategory.NETWORK_ERROR),
        (DownloadTimeoutError("x"), ErrorCategory.DOWNLOAD_TIMEOUT),
        (KeyUnavailableError("x"), ErrorCategory.KEY_UNAVAILABLE),
        (KeyUnwrapError("x"), ErrorCategory.DECRYPTION_FAILED),
        (MalformedPayloadError("x"), ErrorCategory.DECRYPTION_FAILED),
        (PayloadAuthenticationError("x"), ErrorCategory.DECRYPTION_FAILED),
        (PlacementError("x"), ErrorCategory.PLACEMENT_FAILED),
        (UpdateError("x"), ErrorCategory.UPDATE_FAILED),
        (JobStateError("x"), ErrorCategory.INVALID_STATE),
        (RuntimeError("x"), ErrorCategory.SYSTEM_ERROR),
    ])
    def test_category_mapping(self, error, category):
        assert categorize_error(error) == category

    def test_decryption_errors_share_base(self):
        for error_class in (KeyUnavailableError, KeyUnwrapError,
                            MalformedPayloadError, PayloadAuthenticationError):
            assert issubclass(error_class, DecryptionError)

    def test_original_error_is_kept(self):
        cause = OSError("disk full")
        error = PlacementError("cannot place", cause)

        assert error.original_error is cause
        assert isinstance(error, DomainError)

    def test_download_error_status_code(self):
        assert DownloadError("x", status_code=500).status_code == 500
        assert NetworkError("x").status_code is None


class TestDescribeError:

    def test_every_category_has_a_message(self):
        assert set(ERROR_MESSAGES) == set(ErrorCategory)

    def test_describe_error(self):
        info = describe_error(ErrorCategory.NETWORK_ERROR, "dns failure")

        assert info["error"] == "network_error"
        assert info["title"] == "Network Error"
        assert info["detail"] == "dns failure"
        assert info["action"]
