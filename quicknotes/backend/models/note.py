"""
Note Model.

Row layout of the table-backed note store.
"""

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quicknotes.backend.models.base import Base, CreatedAtMixin

# SQLite only autoincrements an INTEGER PRIMARY KEY
NoteId = BigInteger().with_variant(Integer(), "sqlite")


class Note(CreatedAtMixin, Base):
    """
    Note database model.

    The id is issued by the engine (autoincrement primary key), so identity
    uniqueness is enforced by the storage layer rather than computed by
    the application.
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        NoteId,
        primary_key=True,
        autoincrement=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    content: Mapped[str | None] = mapped_column(
        Text,
        default="",
        nullable=True,
    )
    favorite: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r})>"
