"""
Executor for work that must outlive the request that started it.

Handlers submit jobs (cache population, DAG size computation) and return
immediately; :meth:`BackgroundTasks.run` executes them in its own nursery,
independent of any response lifecycle.
"""

from collections.abc import Awaitable, Callable
import logging
import math
from typing import Any

import trio

logger = logging.getLogger(__name__)

Job = tuple[Callable[..., Awaitable[Any]], tuple[Any, ...], str]


class BackgroundTasks:
    """
    Fire-and-forget job queue backed by a trio memory channel.

    Example:
        >>> tasks = BackgroundTasks()
        >>> async with trio.open_nursery() as nursery:
        ...     await nursery.start(tasks.run)
        ...     tasks.submit(cache.put, url, response, name="cache-put")
        ...     ...
        ...     await tasks.aclose()

    """

    def __init__(self) -> None:
        self._send_channel, self._receive_channel = trio.open_memory_channel[Job](
            math.inf
        )
        self._pending = 0
        self._idle = trio.Event()
        self._idle.set()

    @property
    def pending(self) -> int:
        """Number of jobs queued or running."""
        return self._pending

    def submit(
        self, fn: Callable[..., Awaitable[Any]], *args: Any, name: str | None = None
    ) -> None:
        """
        Queue ``fn(*args)`` without blocking.

        Raises:
            trio.ClosedResourceError: if the executor has been closed

        """
        job_name = name or getattr(fn, "__qualname__", repr(fn))
        self._send_channel.send_nowait((fn, args, job_name))
        if self._pending == 0:
            self._idle = trio.Event()
        self._pending += 1
        logger.debug(f"Queued background job {job_name} ({self._pending} pending)")

    async def run(
        self, *, task_status: Any = trio.TASK_STATUS_IGNORED
    ) -> None:
        """
        Execute queued jobs until :meth:`aclose` is called.

        Returns once the queue is closed and every job has finished.
        """
        async with trio.open_nursery() as nursery:
            task_status.started()
            async with self._receive_channel:
                async for fn, args, job_name in self._receive_channel:
                    nursery.start_soon(self._run_job, fn, args, job_name, name=job_name)
        logger.debug("Background task executor stopped")

    async def _run_job(
        self, fn: Callable[..., Awaitable[Any]], args: tuple[Any, ...], job_name: str
    ) -> None:
        try:
            await fn(*args)
        except Exception:
            logger.exception(f"Background job {job_name} failed")
        finally:
            self._pending -= 1
            if self._pending == 0:
                self._idle.set()

    async def wait_idle(self) -> None:
        """Wait until no job is queued or running."""
        while self._pending:
            await self._idle.wait()

    async def aclose(self) -> None:
        """Stop accepting jobs; :meth:`run` exits after draining the queue."""
        await self._send_channel.aclose()
