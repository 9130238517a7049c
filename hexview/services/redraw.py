from __future__ import annotations

"""hexview/services/redraw.py

Coalesces transform updates into at most one renderer call per frame.

Gestures may change the viewport many times between two display refreshes.
Each change calls :meth:`RedrawScheduler.request`; only the first request of a
frame schedules a flush, and the flush reads the *current* transform, so the
renderer always sees the latest state exactly once.
"""

from typing import Callable, Optional
import asyncio
import logging

from hexview.core_models import Transform
from hexview.metrics import REDRAWS_TOTAL

log = logging.getLogger(__name__)

ApplyFn = Callable[[Transform], None]


class RedrawScheduler:
    def __init__(
        self,
        read_transform: Callable[[], Transform],
        on_apply: Optional[ApplyFn] = None,
        frame_s: float = 1 / 60,
    ) -> None:
        self._read = read_transform
        self._on_apply = on_apply
        self._frame_s = frame_s
        self._handle: Optional[asyncio.TimerHandle] = None
        self.pending = False
        self.flushes = 0
        self.last_applied: Optional[Transform] = None

    def request(self) -> None:
        """Schedule a flush on the next frame unless one is already pending."""
        if self.pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (synchronous callers, e.g. start-up): apply right away
            self.flush()
            return
        self.pending = True
        self._handle = loop.call_later(self._frame_s, self.flush)

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.pending = False
        transform = self._read()
        self.last_applied = transform
        self.flushes += 1
        REDRAWS_TOTAL.inc()
        if self._on_apply is not None:
            try:
                self._on_apply(transform)
            except Exception as exc:
                log.error("[Redraw] Renderer callback failed: %s", exc, exc_info=True)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.pending = False
