"""
Integration Tests for Notes API.

Every test runs against both note stores (see the note_store fixture).
"""

import pytest
from httpx import AsyncClient

NOTES = "/api/v1/notes"


async def _create(client: AsyncClient, api, **payload) -> dict:
    response = await client.post(NOTES, json=payload)
    return api.assert_success(response, expected_status=201)["data"]


class TestCreateNote:
    """Tests for POST /api/v1/notes."""

    @pytest.mark.asyncio
    async def test_create_note_success(self, client: AsyncClient, api):
        """Should create a note and return it with defaults filled in."""
        response = await client.post(
            NOTES,
            json={"title": "Test Note", "content": "Test content"},
        )

        data = api.assert_success(response, expected_status=201)
        assert data["data"]["title"] == "Test Note"
        assert data["data"]["content"] == "Test content"
        assert data["data"]["favorite"] is False
        assert data["data"]["created_at"] is not None

    @pytest.mark.asyncio
    async def test_first_note_gets_id_one(self, client: AsyncClient, api):
        """An empty store should hand out id 1."""
        note = await _create(client, api, title="First")

        assert note["id"] == 1

    @pytest.mark.asyncio
    async def test_create_note_without_content(self, client: AsyncClient, api):
        """Missing content should be stored as an empty string."""
        note = await _create(client, api, title="Title Only")

        assert note["content"] == ""

    @pytest.mark.asyncio
    async def test_create_note_accepts_body_alias(self, client: AsyncClient, api):
        """'body' should be accepted in place of 'content'."""
        note = await _create(client, api, title="Aliased", body="from body")

        assert note["content"] == "from body"

    @pytest.mark.asyncio
    async def test_client_supplied_id_is_ignored(self, client: AsyncClient, api):
        """The store assigns ids; a client-supplied id has no effect."""
        note = await _create(client, api, title="Mine", id=42)

        assert note["id"] == 1

    @pytest.mark.asyncio
    async def test_create_note_blank_title_fails(self, client: AsyncClient, api):
        """A whitespace-only title should be rejected by the service."""
        response = await client.post(NOTES, json={"title": "   "})

        data = api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
        assert data["error"]["details"] == {"missing_fields": ["title"]}

    @pytest.mark.asyncio
    async def test_create_note_missing_title_fails(self, client: AsyncClient, api):
        """Should reject missing title."""
        response = await client.post(NOTES, json={"content": "No title"})

        api.assert_validation_error(response, field="title")

    @pytest.mark.asyncio
    async def test_create_note_title_too_long_fails(self, client: AsyncClient, api):
        """Should reject titles over 255 characters."""
        response = await client.post(NOTES, json={"title": "x" * 256})

        api.assert_validation_error(response, field="title")

    @pytest.mark.asyncio
    async def test_create_note_title_at_limit(self, client: AsyncClient, api):
        """A 255 character title is allowed."""
        note = await _create(client, api, title="x" * 255)

        assert len(note["title"]) == 255


class TestListNotes:
    """Tests for GET /api/v1/notes."""

    @pytest.mark.asyncio
    async def test_list_empty(self, client: AsyncClient, api):
        """A fresh store should list no notes."""
        response = await client.get(NOTES)

        data = api.assert_success(response)
        assert data["data"] == []

    @pytest.mark.asyncio
    async def test_list_contains_created_notes(self, client: AsyncClient, api):
        """Every created note should be listed exactly once."""
        first = await _create(client, api, title="One")
        second = await _create(client, api, title="Two")

        response = await client.get(NOTES)

        ids = [note["id"] for note in api.assert_success(response)["data"]]
        assert sorted(ids) == [first["id"], second["id"]]

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, client: AsyncClient, api):
        """Consecutive creates should never reuse an id."""
        ids = [(await _create(client, api, title=f"Note {i}"))["id"] for i in range(5)]

        assert len(set(ids)) == 5


class TestGetNote:
    """Tests for GET /api/v1/notes/{note_id}."""

    @pytest.mark.asyncio
    async def test_get_note_success(self, client: AsyncClient, api):
        """Should return the stored note."""
        created = await _create(client, api, title="Find me", content="here")

        response = await client.get(f"{NOTES}/{created['id']}")

        data = api.assert_success(response)
        assert data["data"] == created

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, client: AsyncClient, api):
        """Should return 404 for an unknown id."""
        response = await client.get(f"{NOTES}/999")

        data = api.assert_error(response, 404, "RES_NOT_FOUND")
        assert data["error"]["message"] == "Note not found"

    @pytest.mark.asyncio
    async def test_get_note_non_integer_id(self, client: AsyncClient, api):
        """A non-integer path id is a request schema error."""
        response = await client.get(f"{NOTES}/abc")

        api.assert_validation_error(response, field="note_id")


class TestUpdateNote:
    """Tests for PATCH and POST /api/v1/notes/{note_id}."""

    @pytest.mark.asyncio
    async def test_patch_changes_only_given_fields(self, client: AsyncClient, api):
        """Fields absent from the request should keep their values."""
        created = await _create(client, api, title="Before", content="keep me")

        response = await client.patch(
            f"{NOTES}/{created['id']}",
            json={"title": "After"},
        )

        data = api.assert_success(response)["data"]
        assert data["title"] == "After"
        assert data["content"] == "keep me"
        assert data["favorite"] is False

    @pytest.mark.asyncio
    async def test_patch_keeps_id_and_created_at(self, client: AsyncClient, api):
        """id and created_at never change on update."""
        created = await _create(client, api, title="Stable")

        response = await client.patch(
            f"{NOTES}/{created['id']}",
            json={"title": "Renamed", "content": "new", "favorite": True},
        )

        data = api.assert_success(response)["data"]
        assert data["id"] == created["id"]
        assert data["created_at"] == created["created_at"]
        assert data["favorite"] is True

    @pytest.mark.asyncio
    async def test_empty_patch_returns_note_unchanged(self, client: AsyncClient, api):
        """An empty body should return the stored note as is."""
        created = await _create(client, api, title="Untouched", content="same")

        response = await client.patch(f"{NOTES}/{created['id']}", json={})

        assert api.assert_success(response)["data"] == created

    @pytest.mark.asyncio
    async def test_post_update_form(self, client: AsyncClient, api):
        """POST /{id} should behave like PATCH."""
        created = await _create(client, api, title="Posted")

        response = await client.post(
            f"{NOTES}/{created['id']}",
            json={"body": "via body alias"},
        )

        data = api.assert_success(response)["data"]
        assert data["title"] == "Posted"
        assert data["content"] == "via body alias"

    @pytest.mark.asyncio
    async def test_null_content_clears_it(self, client: AsyncClient, api):
        """An explicit null content should clear the content."""
        created = await _create(client, api, title="Clear", content="text")

        response = await client.patch(
            f"{NOTES}/{created['id']}",
            json={"content": None},
        )

        assert api.assert_success(response)["data"]["content"] == ""

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, client: AsyncClient, api):
        """An explicit null title should be rejected."""
        created = await _create(client, api, title="Keep")

        response = await client.patch(
            f"{NOTES}/{created['id']}",
            json={"title": None},
        )

        api.assert_error(response, 400, "VAL_VALIDATION_ERROR")

        unchanged = await client.get(f"{NOTES}/{created['id']}")
        assert api.assert_success(unchanged)["data"]["title"] == "Keep"

    @pytest.mark.asyncio
    async def test_update_not_found(self, client: AsyncClient, api):
        """Updating an unknown id should return 404."""
        response = await client.patch(f"{NOTES}/999", json={"title": "Nope"})

        api.assert_error(response, 404, "RES_NOT_FOUND")


class TestToggleFavorite:
    """Tests for POST /api/v1/notes/{note_id}/favorite."""

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_flag(self, client: AsyncClient, api):
        """Two toggles should return the flag to its original value."""
        created = await _create(client, api, title="Fav")
        url = f"{NOTES}/{created['id']}/favorite"

        first = api.assert_success(await client.post(url))["data"]
        second = api.assert_success(await client.post(url))["data"]

        assert first["favorite"] is True
        assert second["favorite"] is False

    @pytest.mark.asyncio
    async def test_toggle_leaves_other_fields(self, client: AsyncClient, api):
        """Toggling should not touch title or content."""
        created = await _create(client, api, title="Fav", content="text")

        response = await client.post(f"{NOTES}/{created['id']}/favorite")

        data = api.assert_success(response)["data"]
        assert data["title"] == "Fav"
        assert data["content"] == "text"

    @pytest.mark.asyncio
    async def test_toggle_not_found(self, client: AsyncClient, api):
        """Toggling an unknown id should return 404."""
        response = await client.post(f"{NOTES}/999/favorite")

        api.assert_error(response, 404, "RES_NOT_FOUND")


class TestDeleteNote:
    """Tests for DELETE /api/v1/notes/{note_id} and DELETE /api/v1/notes?id=."""

    @pytest.mark.asyncio
    async def test_delete_returns_note_then_gone(self, client: AsyncClient, api):
        """Deleting should return the note; a later GET gives 404."""
        created = await _create(client, api, title="Doomed")

        response = await client.delete(f"{NOTES}/{created['id']}")

        assert api.assert_success(response)["data"]["title"] == "Doomed"
        gone = await client.get(f"{NOTES}/{created['id']}")
        api.assert_error(gone, 404, "RES_NOT_FOUND")

    @pytest.mark.asyncio
    async def test_delete_by_query_parameter(self, client: AsyncClient, api):
        """DELETE ?id= should remove the note."""
        created = await _create(client, api, title="Query")

        response = await client.delete(NOTES, params={"id": str(created["id"])})

        assert api.assert_success(response)["data"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_delete_query_missing_id(self, client: AsyncClient, api):
        """DELETE without ?id= should be a 400."""
        response = await client.delete(NOTES)

        data = api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
        assert data["error"]["message"] == "Note ID is required"

    @pytest.mark.asyncio
    async def test_delete_query_invalid_id(self, client: AsyncClient, api):
        """DELETE ?id=abc should be a 400."""
        response = await client.delete(NOTES, params={"id": "abc"})

        data = api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
        assert data["error"]["message"] == "Note ID must be an integer"

    @pytest.mark.asyncio
    async def test_delete_not_found_leaves_collection(self, client: AsyncClient, api):
        """Deleting an unknown id should be a 404 and change nothing."""
        created = await _create(client, api, title="Survivor")

        response = await client.delete(f"{NOTES}/999")

        api.assert_error(response, 404, "RES_NOT_FOUND")
        remaining = api.assert_success(await client.get(NOTES))["data"]
        assert [note["id"] for note in remaining] == [created["id"]]


class TestNoteLifecycle:
    """End-to-end flow across operations."""

    @pytest.mark.asyncio
    async def test_create_two_delete_first(self, client: AsyncClient, api):
        """Create A and B, delete A: only B remains."""
        a = await _create(client, api, title="A")
        b = await _create(client, api, title="B")
        assert (a["id"], b["id"]) == (1, 2)

        api.assert_success(await client.delete(f"{NOTES}/1"))

        remaining = api.assert_success(await client.get(NOTES))["data"]
        assert [note["id"] for note in remaining] == [2]
        assert remaining[0]["title"] == "B"
