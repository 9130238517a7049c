from __future__ import annotations

"""hexview/services/sequencer.py

Single-channel FIFO queue for view transitions.

Transitions (focus a tile, clear the focus) animate over several frames and
read the stage size part-way through, so two of them must never interleave.
:meth:`Sequencer.enqueue` returns a future right away; the tasks behind it
run strictly one at a time in submission order, and while one runs the shared
:class:`InputGate` is locked so gesture handlers ignore input.

A failing task rejects only its own future.  The error is logged and kept as
``last_error``; the queue goes on with the next task.
"""

from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple
import asyncio
import time

import structlog

from hexview.errors import ErrorReport
from hexview.metrics import TRANSITION_LATENCY, TRANSITIONS_TOTAL

log = structlog.get_logger(__name__)

TaskFn = Callable[[], Awaitable[Any]]


class InputGate:
    """Coarse "ignore user input" flag shared by the sequencer and gesture handlers."""

    def __init__(self) -> None:
        self.locked = False

    def set(self, locked: bool) -> None:
        self.locked = bool(locked)


class Sequencer:
    def __init__(self, gate: Optional[InputGate] = None) -> None:
        self.gate = gate or InputGate()
        self._queue: Deque[Tuple[str, TaskFn, asyncio.Future]] = deque()
        self._running = False
        self._drainer: Optional[asyncio.Task] = None
        self.last_error: Optional[ErrorReport] = None
        self.completed = 0

    def is_busy(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        return len(self._queue)

    def enqueue(self, fn: TaskFn, *, kind: str = "task") -> asyncio.Future:
        """Queue *fn* and return a future for its result.

        Must be called from within the running event loop.
        """
        loop = asyncio.get_running_loop()
        fut: asyncio.Future = loop.create_future()
        self._queue.append((kind, fn, fut))
        log.debug("sequencer.enqueued", kind=kind, pending=len(self._queue), running=self._running)
        if not self._running:
            self._running = True
            self.gate.set(True)
            self._drainer = loop.create_task(self._drain())
        return fut

    async def _drain(self) -> None:
        try:
            while self._queue:
                kind, fn, fut = self._queue.popleft()
                await self._run_one(kind, fn, fut)
        finally:
            # Only non-empty when the drainer itself was cancelled
            if self._queue:
                log.warning("sequencer.dropped", pending=len(self._queue))
            while self._queue:
                _, _, fut = self._queue.popleft()
                if not fut.done():
                    fut.cancel()
            self._running = False
            self.gate.set(False)
            self._drainer = None

    async def _run_one(self, kind: str, fn: TaskFn, fut: asyncio.Future) -> None:
        started = time.perf_counter()
        try:
            result = await fn()
        except asyncio.CancelledError:
            if not fut.done():
                fut.cancel()
            raise
        except Exception as exc:
            TRANSITIONS_TOTAL.labels(kind=kind, outcome="error").inc()
            self.last_error = ErrorReport.from_exception(kind, exc)
            log.error("sequencer.task_failed", kind=kind, error=str(exc), exc_info=True)
            if not fut.done():
                fut.set_exception(exc)
        else:
            TRANSITIONS_TOTAL.labels(kind=kind, outcome="ok").inc()
            if not fut.done():
                fut.set_result(result)
        finally:
            TRANSITION_LATENCY.labels(kind=kind).observe(time.perf_counter() - started)
            self.completed += 1

    async def join(self) -> None:
        """Wait until everything queued so far has run."""
        while self._drainer is not None:
            await asyncio.shield(self._drainer)
