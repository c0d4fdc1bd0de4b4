"""
FastAPI Dependencies.

Shared dependencies for request handling, including selection of the
note store configured in storage.yaml.
"""

import uuid
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quicknotes.backend.core.config import get_app_config
from quicknotes.backend.core.database import session_scope
from quicknotes.backend.repositories.base import NoteStore
from quicknotes.backend.repositories.note import NoteRepository
from quicknotes.backend.repositories.note_file import FileNoteRepository
from quicknotes.backend.services.note import NoteService
from quicknotes.backend.storage.json_document import get_document_store


async def get_request_id(request: Request) -> str:
    """Request ID bound by RequestContextMiddleware, else the header, else a new one."""
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("x-request-id") or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def build_note_store(backend: str, session: AsyncSession | None = None) -> NoteStore:
    """Create the store for `backend` ("table" needs a session)."""
    if backend == "file":
        return FileNoteRepository(get_document_store())
    if session is None:
        raise ValueError("The table backend needs a database session")
    return NoteRepository(session)


async def get_note_store() -> AsyncIterator[NoteStore]:
    """
    Note store selected by storage.yaml.

    The table store gets a session that commits when the request handler
    returns and rolls back if it raises. The file store never opens one.
    """
    backend = get_app_config().storage.backend
    if backend == "file":
        yield build_note_store(backend)
        return
    async with session_scope() as session:
        yield build_note_store(backend, session)


def get_note_service(store: Annotated[NoteStore, Depends(get_note_store)]) -> NoteService:
    return NoteService(store)


NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]
