"""
Shared pytest fixtures and configuration for the instance-watcher test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Temporary watch, download and scratch directories
- RSA key material for hybrid decryption tests
- Descriptor helpers and fake collaborators
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict
from unittest.mock import Mock

import pytest

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings

from tests.fixtures.crypto_helpers import generate_private_key
from tests.fixtures.fake_adapters import FakeDownloader, MockJobRepository

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Filesystem Fixtures
# =============================================================================

@pytest.fixture
def watch_dir(tmp_path) -> Path:
    """Provide an empty watch directory."""
    path = tmp_path / "watch"
    path.mkdir()
    return path


@pytest.fixture
def download_dir(tmp_path) -> Path:
    """Provide the default download directory (not created)."""
    return tmp_path / "downloads"


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    """Provide the scratch base directory (not created)."""
    return tmp_path / "scratch"


@pytest.fixture
def write_descriptor(watch_dir) -> Callable[..., Path]:
    """
    Provide a helper writing a job descriptor into the watch directory.

    Dict payloads are JSON encoded; str and bytes are written verbatim.
    """
    def _write(name: str, payload: Any) -> Path:
        path = watch_dir / name
        if isinstance(payload, bytes):
            path.write_bytes(payload)
        elif isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


# =============================================================================
# Cryptography Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def rsa_private_key():
    """Provide an RSA-2048 instance key, generated once per session."""
    return generate_private_key()


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key):
    """Provide the public half of the instance key."""
    return rsa_private_key.public_key()


# =============================================================================
# Mock Collaborator Fixtures
# =============================================================================

@pytest.fixture
def fake_downloader() -> FakeDownloader:
    """Provide a downloader serving canned responses."""
    return FakeDownloader()


@pytest.fixture
def mock_job_repository() -> MockJobRepository:
    """Provide an in-memory job repository."""
    return MockJobRepository()


@pytest.fixture
def mock_storage_repository():
    """
    Provide a mock storage repository for unit testing.

    Returns a Mock object with all IFileStorageRepository interface methods.
    """
    mock = Mock()
    mock.purge_scratch.return_value = True
    mock.cleanup_orphaned_scratch.return_value = 0
    return mock


@pytest.fixture
def sample_descriptor() -> Dict[str, Any]:
    """Provide a minimal valid descriptor."""
    return {"url": "https://bucket.example.com/files/report.pdf?X-Signature=abc123"}


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem, no network)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (full workflows)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/e2e/* -> @pytest.mark.e2e
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path or "\\e2e\\" in test_path:
            item.add_marker(pytest.mark.e2e)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
