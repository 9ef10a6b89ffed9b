"""
Global pytest fixtures for the Shortit test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage fixture for direct testing
    - Provide an AliasAllocator fixture wired to the Storage fixture

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortit.allocator.alias_allocator import AliasAllocator
from shortit.storage.storage import Storage

PREFIX = "https://shortit"


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def allocator(storage: Storage) -> AliasAllocator:
    """Provide an AliasAllocator wired to the storage fixture, with a fixed prefix."""
    return AliasAllocator(storage=storage, prefix=PREFIX, token_length=5, max_attempts=5)


@pytest.fixture
def client() -> TestClient:
    """Provide a fresh TestClient with a new app instance and its own storage."""
    return TestClient(create_app(storage=Storage()))
