"""
Integration Test Fixtures.

Fixtures for integration tests - uses real stores and services.
These fixtures build on the root conftest.py database fixtures.

Every fixture that depends on `note_store` runs once per backend
(table and file), so API behaviour is checked against both stores.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from quicknotes.backend.core.dependencies import get_note_store
from quicknotes.backend.repositories.base import NoteStore
from quicknotes.backend.repositories.note import NoteRepository
from quicknotes.backend.repositories.note_file import FileNoteRepository
from quicknotes.backend.storage.json_document import JsonDocumentStore


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture(params=["table", "file"])
def note_store(
    request: pytest.FixtureRequest,
    db_session: AsyncSession,
    tmp_path: Path,
) -> NoteStore:
    """
    Note store for one backend.

    table: NoteRepository on the rolled-back test session.
    file:  FileNoteRepository on a notes.json under tmp_path.
    """
    if request.param == "table":
        return NoteRepository(db_session)
    return FileNoteRepository(JsonDocumentStore(tmp_path / "notes.json"))


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(note_store: NoteStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client whose requests use `note_store`.

    The app's lifespan does not run under ASGITransport, so no
    database file is created and no logging is reconfigured.

    Usage:
        async def test_list(client: AsyncClient):
            response = await client.get("/api/v1/notes")
            assert response.status_code == 200
    """
    from quicknotes.backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_note_store] = lambda: note_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def client_no_store() -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client without store override.

    Use this for endpoints that don't touch notes (health checks).
    """
    from quicknotes.backend.main import create_app

    app = create_app()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code
            expected_code: Expected error code (optional)

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request schema error (422).

        Args:
            response: httpx Response object
            field: Expected field with validation error (optional)
        """
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
