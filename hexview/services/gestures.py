from __future__ import annotations

"""hexview/services/gestures.py

Translates raw pointer, wheel and key events into viewport changes and
focus transitions.

Pan, pinch and wheel mutate the viewport directly and are never queued.
Taps and keys turn into ``FocusFlow.activate`` / ``deactivate`` calls, which
go through the sequencer.  Every handler bails out while the input gate is
locked, except pointer-up, which still has to forget the pointer.
"""

from typing import Callable, Optional, Tuple
import asyncio
import logging

from pydantic import BaseModel

from hexview.config import Settings
from hexview.core_models import GestureState, Point
from hexview.services.focus_flow import FocusFlow
from hexview.services.sequencer import InputGate
from hexview.services.viewport import ViewportEngine

log = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
TOGGLE_KEYS = ("Enter", " ")


class PointerEvent(BaseModel):
    pointer_id: int
    x: float
    y: float
    button: int = PRIMARY_BUTTON
    # Id of the tile under the pointer, None over empty space
    target_id: Optional[str] = None

    @property
    def point(self) -> Point:
        return Point(x=self.x, y=self.y)


class WheelEvent(BaseModel):
    x: float
    y: float
    delta_y: float
    ctrl_key: bool = False


class KeyEvent(BaseModel):
    key: str
    # Tile holding keyboard focus, if any
    target_id: Optional[str] = None


def _consume(fut: asyncio.Future) -> None:
    # The sequencer already logged and recorded the failure
    if not fut.cancelled():
        fut.exception()


class GestureHandler:
    def __init__(
        self,
        settings: Settings,
        viewport: ViewportEngine,
        flow: FocusFlow,
        gate: InputGate,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.settings = settings
        self.viewport = viewport
        self.flow = flow
        self.gate = gate
        self.on_change = on_change
        self.state = GestureState()
        self._motion_handle: Optional[asyncio.TimerHandle] = None

    # ---- helpers ----------------------------------------------------- #

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _bump_moving(self) -> None:
        self.state.is_moving = True
        if self._motion_handle is not None:
            self._motion_handle.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._clear_moving()
            return
        self._motion_handle = loop.call_later(
            self.settings.seconds(self.settings.motion_settle_ms), self._clear_moving
        )

    def _clear_moving(self) -> None:
        self._motion_handle = None
        self.state.is_moving = False

    def _snapshot_drag(self, at: Point) -> None:
        st = self.state
        st.drag_start = at
        st.origin_tx = self.viewport.state.tx
        st.origin_ty = self.viewport.state.ty

    def _pinch_pair(self) -> Tuple[Point, Point]:
        a, b = list(self.state.pointers.values())[:2]
        return a, b

    def _dispatch(self, fut: asyncio.Future) -> asyncio.Future:
        fut.add_done_callback(_consume)
        return fut

    # ---- wheel ------------------------------------------------------- #

    def on_wheel(self, evt: WheelEvent) -> bool:
        """Zoom toward the cursor. Returns False when input is locked."""
        if self.gate.locked:
            return False
        self.viewport.wheel(Point(x=evt.x, y=evt.y), evt.delta_y, evt.ctrl_key)
        self._bump_moving()
        self._notify()
        return True

    # ---- pointers ---------------------------------------------------- #

    def on_pointer_down(self, evt: PointerEvent) -> None:
        if self.gate.locked or evt.button != PRIMARY_BUTTON:
            return
        st = self.state
        st.pointers[evt.pointer_id] = evt.point
        st.down_at = evt.point
        st.down_target = evt.target_id
        st.is_tap = True

        if len(st.pointers) == 1:
            st.is_dragging = False
            self._snapshot_drag(evt.point)
        elif len(st.pointers) == 2:
            st.is_pinching = True
            st.is_tap = False
            a, b = self._pinch_pair()
            st.last_distance = a.distance_to(b)
            self._bump_moving()

    def on_pointer_move(self, evt: PointerEvent) -> None:
        st = self.state
        if evt.pointer_id not in st.pointers or self.gate.locked:
            return
        st.pointers[evt.pointer_id] = evt.point

        if st.is_pinching and len(st.pointers) >= 2:
            a, b = self._pinch_pair()
            d = a.distance_to(b)
            if d > 0 and st.last_distance > 0:
                self.viewport.pinch(a.midpoint(b), d, st.last_distance)
                st.last_distance = d
                self._bump_moving()
        elif len(st.pointers) == 1 and st.drag_start is not None:
            dx = evt.x - st.drag_start.x
            dy = evt.y - st.drag_start.y
            moved = evt.point.distance_to(st.drag_start) > self.settings.drag_threshold_px
            if moved:
                st.is_tap = False
                if not st.is_dragging:
                    st.is_dragging = True
                    log.debug("[Gestures] drag started at %s", st.drag_start)
            if st.is_dragging:
                self.viewport.pan_from(st.origin_tx, st.origin_ty, dx, dy)
                self._bump_moving()

        self._notify()

    def on_pointer_up(self, evt: PointerEvent) -> Optional[asyncio.Future]:
        """Release a pointer; returns the queued transition when this ends a tap."""
        st = self.state
        if evt.pointer_id not in st.pointers:
            return None
        del st.pointers[evt.pointer_id]
        fut: Optional[asyncio.Future] = None

        if not st.pointers:
            if st.is_tap and not self.gate.locked:
                fut = self._resolve_tap(evt)
            st.is_dragging = False
            st.is_pinching = False
            st.is_tap = False
            st.down_target = None
            st.down_at = None
        elif len(st.pointers) == 1:
            # Pinch -> drag handoff from the remaining finger
            st.is_pinching = False
            remaining = next(iter(st.pointers.values()))
            self._snapshot_drag(remaining)

        self._notify()
        return fut

    on_pointer_cancel = on_pointer_up

    def _resolve_tap(self, evt: PointerEvent) -> asyncio.Future:
        st = self.state
        drifted = st.down_at is not None and evt.point.distance_to(st.down_at) > self.settings.tap_threshold_px
        target = None if drifted else st.down_target
        if target is None:
            return self._dispatch(self.flow.deactivate("emptyTap"))
        if self.flow.focused_id == target:
            return self._dispatch(self.flow.deactivate("activeHexClick"))
        return self._dispatch(self.flow.activate(target))

    # ---- keyboard ---------------------------------------------------- #

    def on_key(self, evt: KeyEvent) -> Optional[asyncio.Future]:
        if self.gate.locked:
            return None
        if evt.key in TOGGLE_KEYS and evt.target_id:
            if self.flow.focused_id == evt.target_id:
                return self._dispatch(self.flow.deactivate("keyboardToggleOff"))
            return self._dispatch(self.flow.activate(evt.target_id))
        if evt.key == "Escape" and self.flow.focused_id is not None:
            return self._dispatch(self.flow.deactivate("esc"))
        return None
