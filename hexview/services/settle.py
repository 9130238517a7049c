from __future__ import annotations

"""hexview/services/settle.py

Waiting for visual transitions without ever depending on them.

The renderer reports the end of a CSS-style transition by firing a
:class:`TransitionSignal`.  Every wait races that signal against a timer and
returns on whichever comes first, so a signal that never fires costs at most
the timeout.
"""

from typing import Iterable, Optional
import asyncio
import logging

from hexview.metrics import SETTLE_TIMEOUTS

log = logging.getLogger(__name__)


class TransitionSignal:
    """Edge-triggered "transition finished" notification for one visual element."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._waiters: list[asyncio.Future] = []

    def fire(self) -> None:
        """Wake everything currently waiting. Waits started later are not affected."""
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)

    def _arm(self) -> asyncio.Future:
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        return fut

    def _disarm(self, fut: asyncio.Future) -> None:
        if fut in self._waiters:
            self._waiters.remove(fut)

    @property
    def waiting(self) -> int:
        return len(self._waiters)


async def wait_settle(signal: Optional[TransitionSignal], timeout_s: float) -> bool:
    """Wait for *signal* or *timeout_s*, whichever is first.

    Returns True when the signal won, False on the timeout fallback.  A
    missing signal simply waits out the timeout.
    """
    timeout_s = max(0.0, timeout_s)
    if signal is None:
        await asyncio.sleep(timeout_s)
        return False

    fut = signal._arm()
    try:
        await asyncio.wait_for(asyncio.shield(fut), timeout=timeout_s)
        return True
    except asyncio.TimeoutError:
        SETTLE_TIMEOUTS.labels(signal=signal.name).inc()
        log.debug("[Settle] %s did not signal within %.3fs; continuing", signal.name, timeout_s)
        return False
    finally:
        signal._disarm(fut)
        if not fut.done():
            fut.cancel()


async def wait_all(waits: Iterable[tuple[Optional[TransitionSignal], float]]) -> list[bool]:
    """Run several settle waits concurrently; returns one flag per wait."""
    return list(await asyncio.gather(*(wait_settle(sig, t) for sig, t in waits)))


async def next_frame(frames: int = 1, frame_s: float = 1 / 60) -> None:
    """Yield for *frames* display-refresh ticks."""
    for _ in range(max(0, frames)):
        await asyncio.sleep(frame_s)
