"""
Pytest configuration and fixtures for updater tests.
"""

import shutil
import tempfile
import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from self_updater.config import Config


@pytest.fixture
def temp_directory():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_config():
    """Configuration that never blocks on input or idles."""
    config = Config()
    config.launch.idle_seconds = 0
    config.launch.wait_for_acknowledgment = False
    config.updates.request_timeout = 5
    return config


@pytest.fixture
def make_zip(temp_directory):
    """Build a zip from {name: bytes or None}; None marks a directory entry."""

    def _make_zip(entries, name="package.zip"):
        archive_path = temp_directory / name
        with zipfile.ZipFile(archive_path, "w") as archive:
            for entry_name, content in entries.items():
                if content is None:
                    archive.writestr(zipfile.ZipInfo(entry_name), b"")
                else:
                    archive.writestr(entry_name, content)
        return archive_path

    return _make_zip


@pytest.fixture
def install_dir(temp_directory):
    target = temp_directory / "app"
    target.mkdir()
    return target


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Clean environment variables for each test."""
    monkeypatch.delenv("SELF_UPDATER_CONFIG", raising=False)


class AsyncContextManager:
    """Helper class for async context manager testing."""

    def __init__(self, return_value):
        self.return_value = return_value

    async def __aenter__(self):
        return self.return_value

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class FakeContent:
    """Stand-in for aiohttp's StreamReader."""

    def __init__(self, data: bytes):
        self.data = data

    async def iter_chunked(self, size):
        for start in range(0, len(self.data), size):
            yield self.data[start:start + size]


def make_response(json_data=None, body=b"", status_error=None):
    response = Mock()
    response.status = 200
    response.headers = {"content-length": str(len(body))}
    response.json = AsyncMock(return_value=json_data)
    response.content = FakeContent(body)
    response.raise_for_status = Mock(side_effect=status_error)
    return response


@pytest.fixture
def mock_aiohttp_session():
    """Build a ClientSession replacement serving canned responses by URL."""

    def _build(responses):
        session = Mock()

        def get(url, **kwargs):
            result = responses[url]
            if isinstance(result, Exception):
                raise result
            return AsyncContextManager(result)

        session.get = Mock(side_effect=get)
        return Mock(return_value=AsyncContextManager(session))

    return _build


# Pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "posix: marks tests that rely on POSIX advisory locks")


@pytest.fixture
def response_factory():
    return make_response
