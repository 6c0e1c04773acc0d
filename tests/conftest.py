"""
Pytest configuration and common fixtures for fshandler tests.

This module provides shared fixtures for testing storage backends and the
storage service. All fixtures follow camelCase naming convention.
"""

from typing import Generator
from unittest.mock import Mock, patch

import pytest

from fshandler.storage.backends.filesystem import LocalStorageBackend
from fshandler.storage.backends.s3 import S3StorageBackend
from fshandler.storage.service import StorageService
from tests.fixtures import FakeS3Client

# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def localBackend(tmp_path) -> LocalStorageBackend:
    """
    Create a LocalStorageBackend rooted in a fresh temporary directory.

    Returns:
        LocalStorageBackend: Backend whose rootDir is tmp_path / "root"
    """
    return LocalStorageBackend(str(tmp_path / "root"))


@pytest.fixture
def fakeS3Client() -> FakeS3Client:
    """
    Create an in-memory S3 client paging listings every 100 keys.

    Returns:
        FakeS3Client: Fake client with an existing bucket
    """
    return FakeS3Client(pageSize=100)


@pytest.fixture
def s3Backend(fakeS3Client) -> Generator[S3StorageBackend, None, None]:
    """
    Create S3StorageBackend wired to the fake client.

    Yields:
        S3StorageBackend: Backend using bucket "test-bucket"
    """
    with patch("fshandler.storage.backends.s3.boto3.client", return_value=fakeS3Client):
        backend = S3StorageBackend(
            bucket="test-bucket",
            region="us-east-1",
            keyId="test-key-id",
            keySecret="test-key-secret",
        )
    yield backend
    backend.close()


@pytest.fixture(params=["local", "s3"])
def anyBackend(request, localBackend, s3Backend):
    """
    Run a test once per backend implementation.

    Returns:
        AbstractStorageBackend: local or S3 backend
    """
    return localBackend if request.param == "local" else s3Backend


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def resetStorageServiceSingleton() -> Generator[None, None, None]:
    """Reset StorageService singleton around a test, dood!"""
    StorageService._instance = None
    yield
    if StorageService._instance is not None and StorageService._instance.backend is not None:
        StorageService._instance.shutdown()
    StorageService._instance = None


@pytest.fixture
def mockConfigManager() -> Mock:
    """
    Create a mock ConfigManager.

    Example:
        def testSomething(mockConfigManager):
            mockConfigManager.getStorageConfig.return_value = {"type": "local", ...}
    """
    from fshandler.config.manager import ConfigManager

    mock = Mock(spec=ConfigManager)
    mock.getStorageConfig.return_value = {}
    mock.getLoggingConfig.return_value = {}
    return mock
