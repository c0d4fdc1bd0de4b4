"""
Note Service.

Business logic layer for notes. Works against any NoteStore, so the same
operations behave identically over the notes table and notes.json.
"""

from typing import Any

from quicknotes.backend.repositories.base import NoteRecord, NoteStore
from quicknotes.backend.schemas.note import TITLE_MAX_LENGTH, NoteCreate, NoteUpdate
from quicknotes.backend.services.base import BaseService


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles validation, partial-update merging and error translation;
    identity assignment is delegated to the store.
    """

    def __init__(self, repo: NoteStore) -> None:
        super().__init__()
        self.repo = repo

    async def list_notes(self) -> list[NoteRecord]:
        """List every note in the store's order."""
        return await self._execute_store_operation(
            "list_notes",
            self.repo.list_notes(),
        )

    async def get_note(self, note_id: int) -> NoteRecord:
        """
        Get a note by ID.

        Raises:
            NotFoundError: If note not found
        """
        return await self._execute_store_operation(
            "get_note",
            self.repo.get_by_id(note_id),
        )

    async def create_note(self, data: NoteCreate) -> NoteRecord:
        """
        Create a new note.

        The store assigns id and created_at; favorite starts False and
        missing content is stored as an empty string.

        Raises:
            ValidationError: If the title is blank or too long
        """
        self._validate_title(data.title)
        self._log_operation("Creating note", title=data.title, backend=self.repo.backend)

        note = await self._execute_store_operation(
            "create_note",
            self.repo.create(title=data.title, content=data.content or ""),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def update_note(self, note_id: int, data: NoteUpdate) -> NoteRecord:
        """
        Apply a partial update.

        Only fields explicitly present in `data` are changed. An empty
        update returns the stored note without writing.

        Raises:
            NotFoundError: If note not found
            ValidationError: If title/favorite are set to null or title is blank
        """
        changes = self._build_changes(data)

        if not changes:
            return await self.get_note(note_id)

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=sorted(changes),
        )

        return await self._execute_store_operation(
            "update_note",
            self.repo.update(note_id, **changes),
        )

    async def toggle_favorite(self, note_id: int) -> NoteRecord:
        """
        Flip the favorite flag.

        Raises:
            NotFoundError: If note not found
        """
        self._log_operation("Toggling favorite", note_id=note_id)
        note = await self._execute_store_operation(
            "toggle_favorite",
            self.repo.toggle_favorite(note_id),
        )
        self._log_debug("Favorite toggled", note_id=note_id, favorite=note.favorite)
        return note

    async def delete_note(self, note_id: int) -> NoteRecord:
        """
        Delete a note and return it.

        Raises:
            NotFoundError: If note not found
        """
        self._log_operation("Deleting note", note_id=note_id)
        return await self._execute_store_operation(
            "delete_note",
            self.repo.delete(note_id),
        )

    def _build_changes(self, data: NoteUpdate) -> dict[str, Any]:
        changes = data.model_dump(exclude_unset=True)

        if "title" in changes:
            self._validate_title(changes["title"])
        if "favorite" in changes:
            self._validate_required(changes, ["favorite"])
        if "content" in changes and changes["content"] is None:
            changes["content"] = ""

        return changes

    def _validate_title(self, title: str | None) -> None:
        self._validate_required({"title": title}, ["title"])
        self._validate_string_length(title, "title", max_length=TITLE_MAX_LENGTH)
