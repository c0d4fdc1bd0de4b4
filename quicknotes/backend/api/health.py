"""
Health Check Endpoints.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (active note store reachable)
"""

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from quicknotes.backend.core.config import get_app_config
from quicknotes.backend.core.logging import get_logger
from quicknotes.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """Run SELECT 1 against the notes database."""
    from quicknotes.backend.core.database import get_session_factory

    try:
        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def check_notes_document() -> dict[str, Any]:
    """Read notes.json through the shared document store."""
    from quicknotes.backend.storage.json_document import get_document_store

    try:
        store = get_document_store()
        async with store.lock:
            records = await store.read()
        return {"status": "healthy", "path": str(store.path), "notes": len(records)}
    except Exception as e:
        logger.warning("Notes document health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check.

    Checks the note store selected in storage.yaml and returns 503 if it
    is unreachable or corrupted.
    """
    app_config = get_app_config()
    backend = app_config.storage.backend
    check = check_notes_document if backend == "file" else check_database

    try:
        async with asyncio.timeout(app_config.application.timeouts.database):
            result = await check()
    except TimeoutError:
        result = {"status": "unhealthy", "error": "check timed out"}

    checks = {"store": {"backend": backend, **result}}

    if result["status"] != "healthy":
        logger.warning("Readiness check failed", extra={"checks": checks})
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
