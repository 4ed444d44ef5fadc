"""
Pytest fixtures for api_host tests.

Provides:
- Temporary storage file
- AppConfig pointing at it
- TestClient for the assembled application
"""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

from brainstorm.api_host import create_app, AppConfig


@pytest.fixture
def temp_storage_file():
    """Path to a storage file in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "brainstorm.json")


@pytest.fixture
def test_config(temp_storage_file) -> AppConfig:
    return AppConfig(
        storage_file=temp_storage_file,
        expansion_url="http://127.0.0.1:9",
        expansion_timeout=1.0,
    )


@pytest.fixture
def test_app(test_config) -> TestClient:
    """TestClient for an app using the temporary storage file."""
    return TestClient(create_app(test_config))
