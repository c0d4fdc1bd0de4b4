"""
Unit Test Fixtures.

Fixtures for unit tests - external dependencies are mocked.
Unit tests never touch a real database.
"""

from unittest.mock import AsyncMock

import pytest

from quicknotes.backend.repositories.base import NoteStore


@pytest.fixture
def mock_note_store() -> AsyncMock:
    """
    Mock NoteStore.

    spec= keeps the mock honest about the store contract.
    """
    store = AsyncMock(spec=NoteStore)
    store.backend = "mock"
    return store
