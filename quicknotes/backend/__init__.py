"""
quicknotes backend.

- api/: FastAPI routers (health, v1 notes)
- core/: configuration, logging, errors, database, concurrency
- models/: SQLAlchemy models for the table-backed store
- repositories/: NoteStore contract and its table/file implementations
- schemas/: request/response and notes.json record schemas
- services/: NoteService business logic
- storage/: whole-document JSON storage
"""
