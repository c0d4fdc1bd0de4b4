"""
Note Schemas.

Pydantic schemas for note API request/response validation, plus the
record layout of the notes.json document.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 255


class NoteCreate(BaseModel):
    """Schema for creating a new note. Client-supplied ids are ignored."""

    title: str = Field(
        ...,
        max_length=TITLE_MAX_LENGTH,
        description="Note title",
        examples=["My First Note"],
    )
    content: str | None = Field(
        default=None,
        validation_alias=AliasChoices("content", "body"),
        description="Note content (also accepted as 'body')",
        examples=["This is the content of my note."],
    )


class NoteUpdate(BaseModel):
    """
    Schema for a partial update.

    Only fields present in the request are applied; absent fields are left
    untouched. Use model_dump(exclude_unset=True) to get the change set.
    """

    title: str | None = Field(
        default=None,
        max_length=TITLE_MAX_LENGTH,
        description="Note title",
    )
    content: str | None = Field(
        default=None,
        validation_alias=AliasChoices("content", "body"),
        description="Note content (also accepted as 'body')",
    )
    favorite: bool | None = Field(
        default=None,
        description="Favorite flag",
    )


class NoteResponse(BaseModel):
    """Schema for a note in API responses."""

    id: int = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str | None = Field(description="Note content")
    favorite: bool = Field(description="Whether the note is a favorite")
    created_at: datetime | None = Field(description="Creation timestamp (UTC)")

    model_config = ConfigDict(from_attributes=True)


class NoteDocument(BaseModel):
    """
    One record of the notes.json document.

    Serialized with by_alias=True so the file keeps its
    {id, title, body, favorite, createdAt} layout.
    """

    id: int
    title: str
    content: str = Field(default="", alias="body")
    favorite: bool = False
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("content", mode="before")
    @classmethod
    def _null_body_is_empty(cls, value: object) -> object:
        return "" if value is None else value
