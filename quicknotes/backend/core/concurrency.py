"""
Concurrency Infrastructure.

Shared thread pool for blocking I/O. The file-backed note store runs its
reads, writes and fsyncs here so the event loop never blocks on disk.

The pool is created lazily on first access and shut down with the app.
Sizing is configured in config/settings/concurrency.yaml.

Usage:
    from quicknotes.backend.core.concurrency import get_io_pool

    result = await loop.run_in_executor(get_io_pool(), blocking_fn, arg)
"""

import asyncio
import contextvars
from concurrent.futures import ThreadPoolExecutor

from quicknotes.backend.core.logging import get_logger

logger = get_logger(__name__)

_io_pool: ThreadPoolExecutor | None = None


class TracedThreadPoolExecutor(ThreadPoolExecutor):
    """ThreadPoolExecutor that propagates contextvars to worker threads.

    Standard ThreadPoolExecutor does not carry the structlog request context
    into worker threads. This subclass copies the current context before
    dispatching, so request_id survives the hop.
    """

    def submit(self, fn, /, *args, **kwargs):
        ctx = contextvars.copy_context()
        return super().submit(ctx.run, fn, *args, **kwargs)


def get_io_pool() -> TracedThreadPoolExecutor:
    """Get the shared thread pool for blocking I/O operations."""
    global _io_pool
    if _io_pool is None:
        from quicknotes.backend.core.config import get_app_config
        max_workers = get_app_config().concurrency.thread_pool.max_workers
        _io_pool = TracedThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="quicknotes-io",
        )
        logger.info("Thread pool created", extra={"max_workers": max_workers})
    return _io_pool


async def shutdown_pools() -> None:
    """Shut down the I/O pool. Called during application shutdown.

    Pool shutdown is blocking, so it runs in a thread to avoid stalling
    the event loop.
    """
    global _io_pool

    if _io_pool is not None:
        await asyncio.to_thread(_io_pool.shutdown, wait=True)
        logger.info("Thread pool shut down")
        _io_pool = None
