from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from session_scheduler.core.exceptions import SchedulingError
from session_scheduler.core.logging import get_logger

logger = get_logger(__name__)

JobFn = Callable[[], Any]


@dataclass
class ScheduledJob:
    name: str
    fn: JobFn
    delay_ms: float
    handle: asyncio.TimerHandle


class JobScheduler:
    """Runs a function once after a delay, keeping one live timer per job name.

    Scheduling under a name replaces whatever was pending under it. Only the
    timer is replaced: a job callback that is already running keeps running,
    so a callback may safely reschedule its own name.
    """

    def __init__(
        self,
        names: Iterable[str],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._names = frozenset(names)
        self._loop = loop
        self._jobs: dict[str, ScheduledJob] = {}
        self._running: set[asyncio.Task] = set()

    @property
    def names(self) -> frozenset[str]:
        """Names with a pending timer."""
        return frozenset(self._jobs)

    @property
    def running(self) -> frozenset[asyncio.Task]:
        return frozenset(self._running)

    def get(self, name: str) -> ScheduledJob | None:
        self._check_name(name)
        return self._jobs.get(name)

    def schedule(self, name: str, fn: JobFn, delay_ms: float) -> ScheduledJob:
        self._check_name(name)
        self.cancel(name)

        delay_ms = max(delay_ms, 0)
        loop = self._loop or asyncio.get_running_loop()
        handle = loop.call_later(delay_ms / 1000, self._fire, name)
        job = ScheduledJob(name=name, fn=fn, delay_ms=delay_ms, handle=handle)
        self._jobs[name] = job
        logger.debug("job_scheduled", job=name, delay_ms=delay_ms)
        return job

    def cancel(self, name: str) -> None:
        self._check_name(name)
        job = self._jobs.pop(name, None)
        if job is None:
            return
        job.handle.cancel()
        logger.debug("job_cancelled", job=name)

    def clear(self) -> None:
        """Cancel every pending timer. Callbacks already running are left alone."""
        for name in list(self._jobs):
            self.cancel(name)

    def close(self) -> None:
        """Cancel pending timers and any job callbacks still in flight."""
        self.clear()
        current = _current_task()
        for task in list(self._running):
            if task is not current and not task.done():
                task.cancel()
        self._running.clear()

    def _fire(self, name: str) -> None:
        job = self._jobs.pop(name, None)
        if job is None:
            return
        logger.debug("job_fired", job=name)
        try:
            result = job.fn()
        except Exception:
            logger.exception("job_failed", job=name)
            return

        if inspect.isawaitable(result):
            loop = self._loop or asyncio.get_running_loop()
            task = loop.create_task(_await(result), name=name)
            self._running.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("job_failed", job=task.get_name(), exc_info=exc)

    def _check_name(self, name: str) -> None:
        if name not in self._names:
            raise SchedulingError(
                message=f"Unknown job name: {name!r}",
                detail=f"known={sorted(self._names)}",
            )


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
