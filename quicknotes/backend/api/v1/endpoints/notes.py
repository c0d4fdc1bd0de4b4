"""
Notes API Endpoints.

REST API endpoints for note management. Every handler delegates to
NoteService; the active store comes from storage.yaml.
"""

from fastapi import APIRouter, Query

from quicknotes.backend.core.dependencies import NoteServiceDep, RequestId
from quicknotes.backend.core.exceptions import ValidationError
from quicknotes.backend.schemas.base import ApiResponse, ResponseMetadata
from quicknotes.backend.schemas.note import NoteCreate, NoteResponse, NoteUpdate

router = APIRouter()


def _envelope(note, request_id: str) -> ApiResponse[NoteResponse]:
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


def _parse_note_id(raw: str | None) -> int:
    """Parse the ?id= query parameter of DELETE /notes."""
    if raw is None or not raw.strip():
        raise ValidationError("Note ID is required", details={"id": "missing"})
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(
            "Note ID must be an integer",
            details={"id": raw},
        ) from None


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List notes",
    description="Get every note. Table store: newest first. File store: insertion order.",
)
async def list_notes(
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[list[NoteResponse]]:
    notes = await service.list_notes()
    return ApiResponse(
        data=[NoteResponse.model_validate(note) for note in notes],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a new note with a title and optional content (or body).",
)
async def create_note(
    data: NoteCreate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    note = await service.create_note(data)
    return _envelope(note, request_id)


@router.delete(
    "",
    response_model=ApiResponse[NoteResponse],
    summary="Delete a note by query parameter",
    description="Delete the note given by ?id=. Returns the deleted note.",
)
async def delete_note_by_query(
    service: NoteServiceDep,
    request_id: RequestId,
    id: str | None = Query(default=None, description="Note ID"),
) -> ApiResponse[NoteResponse]:
    note = await service.delete_note(_parse_note_id(id))
    return _envelope(note, request_id)


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
)
async def get_note(
    note_id: int,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    note = await service.get_note(note_id)
    return _envelope(note, request_id)


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Partial update. Only provided fields are changed.",
)
@router.post(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note (POST form)",
    description="Same as PATCH, for clients that cannot send PATCH.",
)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    note = await service.update_note(note_id, data)
    return _envelope(note, request_id)


@router.post(
    "/{note_id}/favorite",
    response_model=ApiResponse[NoteResponse],
    summary="Toggle favorite",
)
async def toggle_favorite(
    note_id: int,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    note = await service.toggle_favorite(note_id)
    return _envelope(note, request_id)


@router.delete(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Delete a note",
    description="Permanently delete a note. Returns the deleted note.",
)
async def delete_note(
    note_id: int,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    note = await service.delete_note(note_id)
    return _envelope(note, request_id)
