"""
Note Repository.

Table-backed note store. Each note is one row of the `notes` table;
ids come from the engine's autoincrement primary key.
"""

from sqlalchemy import not_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quicknotes.backend.models.note import Note
from quicknotes.backend.repositories.base import BaseRepository, NoteStore


class NoteRepository(BaseRepository[Note], NoteStore):
    """
    Repository for the Note model.

    Inherits row-level CRUD from BaseRepository and adds the
    note-specific list order and atomic favorite toggle.
    """

    model = Note
    backend = "table"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_notes(self) -> list[Note]:
        """Get all notes, newest first (id breaks created_at ties)."""
        result = await self.session.execute(
            select(Note).order_by(Note.created_at.desc(), Note.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, title: str, content: str) -> Note:
        return await super().create(title=title, content=content, favorite=False)

    async def toggle_favorite(self, note_id: int) -> Note:
        """
        Flip the favorite flag with a single UPDATE.

        Raises:
            NotFoundError: If note not found
        """
        instance = await self.get_by_id(note_id)
        await self.session.execute(
            update(Note)
            .where(Note.id == note_id)
            .values(favorite=not_(Note.favorite))
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(instance)
        return instance
