"""
File Note Repository.

File-backed note store over a JsonDocumentStore. Every mutation is a
read-modify-write of the whole collection performed while holding the
document lock, which makes id assignment and updates race-free within
the process.

Identity assignment: max(existing ids) + 1, or 1 for an empty collection.
"""

from collections import Counter
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from quicknotes.backend.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreCorruptedError,
)
from quicknotes.backend.core.logging import get_logger
from quicknotes.backend.core.utils import utc_now
from quicknotes.backend.repositories.base import NoteStore
from quicknotes.backend.schemas.note import NoteDocument
from quicknotes.backend.storage.json_document import JsonDocumentStore

logger = get_logger(__name__)

_documents = TypeAdapter(list[NoteDocument])

NOT_FOUND_MESSAGE = "Note not found"


class FileNoteRepository(NoteStore):
    """
    Note store persisted as a single JSON array.

    Notes are listed in insertion order.
    """

    backend = "file"

    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    async def list_notes(self) -> list[NoteDocument]:
        async with self.store.lock:
            return await self._load()

    async def get_by_id(self, note_id: int) -> NoteDocument:
        async with self.store.lock:
            notes = await self._load()
        return notes[_index_of(notes, note_id)]

    async def create(self, title: str, content: str) -> NoteDocument:
        async with self.store.lock:
            notes = await self._load()
            note = NoteDocument(
                id=next_note_id(notes),
                title=title,
                content=content,
                favorite=False,
                created_at=utc_now(),
            )
            notes.append(note)
            await self._save(notes)

        logger.debug("Note appended to document", extra={"note_id": note.id})
        return note

    async def update(self, note_id: int, **fields: Any) -> NoteDocument:
        async with self.store.lock:
            notes = await self._load()
            index = _index_of(notes, note_id)
            if not fields:
                return notes[index]

            # id and created_at are immutable
            fields.pop("id", None)
            fields.pop("created_at", None)
            notes[index] = notes[index].model_copy(update=fields)
            await self._save(notes)
            return notes[index]

    async def toggle_favorite(self, note_id: int) -> NoteDocument:
        async with self.store.lock:
            notes = await self._load()
            index = _index_of(notes, note_id)
            notes[index] = notes[index].model_copy(
                update={"favorite": not notes[index].favorite}
            )
            await self._save(notes)
            return notes[index]

    async def delete(self, note_id: int) -> NoteDocument:
        async with self.store.lock:
            notes = await self._load()
            removed = notes.pop(_index_of(notes, note_id))
            await self._save(notes)
            return removed

    async def _load(self) -> list[NoteDocument]:
        records = await self.store.read()
        try:
            notes = _documents.validate_python(records)
        except PydanticValidationError as e:
            raise StoreCorruptedError(
                f"Notes document holds {e.error_count()} invalid record field(s)"
            ) from e

        duplicates = _duplicate_ids(notes)
        if duplicates:
            raise StoreCorruptedError(
                f"Notes document holds duplicate ids: {sorted(duplicates)}"
            )
        return notes

    async def _save(self, notes: list[NoteDocument]) -> None:
        duplicates = _duplicate_ids(notes)
        if duplicates:
            raise ConflictError(f"Duplicate note id {min(duplicates)}")
        await self.store.overwrite(
            [note.model_dump(mode="json", by_alias=True) for note in notes]
        )


def next_note_id(notes: list[NoteDocument]) -> int:
    """Next id for the collection: highest existing id plus one, starting at 1."""
    return max((note.id for note in notes), default=0) + 1


def _index_of(notes: list[NoteDocument], note_id: int) -> int:
    for index, note in enumerate(notes):
        if note.id == note_id:
            return index
    raise NotFoundError(NOT_FOUND_MESSAGE)


def _duplicate_ids(notes: list[NoteDocument]) -> set[int]:
    counts = Counter(note.id for note in notes)
    return {note_id for note_id, count in counts.items() if count > 1}
