"""
JSON Document Store.

Holds an entire collection as one JSON array on disk. The file-backed note
repository builds its read-modify-write cycles on top of this class.

Read semantics:
    missing file              -> file initialized with [], empty collection
    empty / whitespace file   -> empty collection
    invalid JSON / not a list -> StoreCorruptedError

Writes go to a temp file in the same directory, are fsynced, and then
replace the document with os.replace, so a reader never observes a
half-written array.

Usage:
    store = JsonDocumentStore(Path("data/notes.json"))
    async with store.lock:
        records = await store.read()
        records.append({...})
        await store.overwrite(records)
"""

import asyncio
import json
import os
import tempfile
from collections.abc import Callable
from concurrent.futures import Executor
from pathlib import Path
from typing import Any

from quicknotes.backend.core.exceptions import StorageError, StoreCorruptedError
from quicknotes.backend.core.logging import get_logger

logger = get_logger(__name__)

_store: "JsonDocumentStore | None" = None


class JsonDocumentStore:
    """
    Whole-document read/overwrite over a single JSON file.

    `lock` is the single writer for this document: callers hold it across
    read -> mutate -> overwrite so concurrent requests cannot interleave.
    read() and overwrite() themselves do not take the lock.
    """

    def __init__(
        self,
        path: Path,
        indent: int = 2,
        executor_factory: Callable[[], Executor] | None = None,
    ) -> None:
        self._path = Path(path)
        self._indent = indent
        self._executor_factory = executor_factory
        self.lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def read(self) -> list[dict[str, Any]]:
        """Return the raw records of the document."""
        return await self._run(self._read_sync)

    async def overwrite(self, records: list[dict[str, Any]]) -> None:
        """Replace the whole document with `records`."""
        await self._run(self._write_sync, records)

    async def _run(self, fn: Any, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        # Resolved per call: the shared pool is recreated after shutdown_pools()
        executor = self._executor_factory() if self._executor_factory else None
        try:
            return await loop.run_in_executor(executor, fn, *args)
        except OSError as e:
            logger.error(
                "Notes document I/O failed",
                extra={"path": str(self._path), "error": str(e)},
            )
            raise StorageError(f"Cannot access notes document: {self._path}") from e

    def _read_sync(self) -> list[dict[str, Any]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Notes document not found, initializing", extra={"path": str(self._path)})
            self._write_sync([])
            return []
        except UnicodeDecodeError as e:
            raise StoreCorruptedError("Notes document is not valid UTF-8") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreCorruptedError(
                f"Notes document is not valid JSON (line {e.lineno}, column {e.colno})"
            ) from e

        if not isinstance(data, list):
            raise StoreCorruptedError(
                f"Notes document must hold a JSON array, found {type(data).__name__}"
            )
        return data

    def _write_sync(self, records: list[dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=self._indent)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def get_document_store() -> JsonDocumentStore:
    """
    Get the process-wide notes document store, creating it on first use.

    A single instance means a single lock, so every request in this
    process serializes on the same writer.
    """
    global _store
    if _store is None:
        from quicknotes.backend.core.concurrency import get_io_pool
        from quicknotes.backend.core.config import get_app_config, get_notes_file_path

        _store = JsonDocumentStore(
            get_notes_file_path(),
            indent=get_app_config().storage.file.indent,
            executor_factory=get_io_pool,
        )
        logger.debug("Notes document store created", extra={"path": str(_store.path)})
    return _store
