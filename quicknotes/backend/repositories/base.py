"""
Base Repository.

Two layers live here:

- NoteStore: the storage-agnostic contract every note store implements.
  The service layer depends only on this, so the table-backed and
  file-backed stores are interchangeable.
- BaseRepository: common SQLAlchemy CRUD for table-backed repositories.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quicknotes.backend.core.exceptions import NotFoundError
from quicknotes.backend.core.logging import get_logger
from quicknotes.backend.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class NoteRecord(Protocol):
    """Attribute shape shared by ORM rows and notes.json records."""

    id: int
    title: str
    content: str | None
    favorite: bool
    created_at: datetime | None


class NoteStore(ABC):
    """
    Storage contract for the note collection.

    Every lookup by id raises NotFoundError when the id does not exist.
    """

    backend: str

    @abstractmethod
    async def list_notes(self) -> list[NoteRecord]:
        """Return every note, in the store's natural order."""

    @abstractmethod
    async def get_by_id(self, note_id: int) -> NoteRecord:
        """Return the note with `note_id`."""

    @abstractmethod
    async def create(self, title: str, content: str) -> NoteRecord:
        """Persist a new note, assigning id, created_at and favorite=False."""

    @abstractmethod
    async def update(self, note_id: int, **fields: Any) -> NoteRecord:
        """Merge `fields` into the note and return the stored result."""

    @abstractmethod
    async def toggle_favorite(self, note_id: int) -> NoteRecord:
        """Flip the favorite flag in a single step."""

    @abstractmethod
    async def delete(self, note_id: int) -> NoteRecord:
        """Hard-delete the note and return it as it was."""


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: int) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        instance = result.scalar_one_or_none()

        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")

        return instance

    async def create(self, **kwargs: Any) -> ModelType:
        """Insert a record, then re-read it so server-side defaults are populated."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int, **kwargs: Any) -> ModelType:
        """
        Update an existing record.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id(id)

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> ModelType:
        """
        Delete a record by ID and return it.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id(id)
        await self.session.delete(instance)
        await self.session.flush()
        return instance
