from __future__ import annotations

"""hexview/session.py

:class:`HexSession` wires one item set to its layout, viewport, panels,
sequencer, focus flow and gesture handler.  Hosts create one per rendered
grid and forward DOM-like events to :attr:`HexSession.gestures`.
"""

from typing import Any, Callable, List, Mapping, Optional
import asyncio

import structlog

from hexview.config import Settings, load_settings
from hexview.core_models import Item, StageRect, Transform, WindowSize
from hexview.services.focus_flow import FocusFlow, StageReader, WindowReader
from hexview.services.gestures import GestureHandler
from hexview.services.layout_engine import LayoutEngine
from hexview.services.panels import InfoPanel, SidePanel
from hexview.services.redraw import RedrawScheduler
from hexview.services.sequencer import InputGate, Sequencer
from hexview.services.settle import next_frame
from hexview.services.viewport import ViewportEngine

log = structlog.get_logger(__name__)


class HexSession:
    def __init__(
        self,
        items: Optional[List[Item]] = None,
        *,
        records: Any = None,
        overview: Optional[Mapping[str, Any]] = None,
        settings: Optional[Settings] = None,
        read_stage: StageReader,
        read_window: Optional[WindowReader] = None,
        on_apply: Optional[Callable[[Transform], None]] = None,
        panel_collapsed: bool = False,
    ) -> None:
        self.settings = settings or load_settings()
        if items is None:
            items = Item.from_records(records)
        self.items = list(items)
        self.items_by_id = {it.id: it for it in self.items}
        self.read_stage = read_stage
        self.read_window = read_window

        self.layout = LayoutEngine(overview)
        self.layout.apply_layout(self.items)

        self.redraw = RedrawScheduler(
            lambda: self.viewport.transform(),
            on_apply,
            frame_s=self.settings.seconds(self.settings.frame_interval_ms),
        )
        self.viewport = ViewportEngine(self.settings, self.layout, self.redraw)
        self.side_panel = SidePanel(collapsed=panel_collapsed)
        self.info_panel = InfoPanel()
        self.gate = InputGate()
        self.sequencer = Sequencer(self.gate)
        self.flow = FocusFlow(
            self.settings,
            self.sequencer,
            self.viewport,
            self.side_panel,
            self.info_panel,
            self.items_by_id,
            read_stage,
            read_window,
        )
        self.gestures = GestureHandler(self.settings, self.viewport, self.flow, self.gate)
        self._resize_handle: Optional[asyncio.TimerHandle] = None
        self._resize_task: Optional[asyncio.Task] = None

        log.info("session.created", items=len(self.items), extent=self.layout.extent.model_dump())

    # ------------------------------------------------------------------ #
    # Stage
    # ------------------------------------------------------------------ #

    def _window(self) -> Optional[WindowSize]:
        return self.read_window() if self.read_window else None

    def _stage(self) -> StageRect:
        return self.read_stage()

    async def initial_fit(self) -> Transform:
        transform = self.viewport.fit(self._stage(), self._window())
        await next_frame(2, self.settings.seconds(self.settings.frame_interval_ms))
        return transform

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    @property
    def focused_id(self) -> Optional[str]:
        return self.flow.focused_id

    def activate(self, item_id: str) -> asyncio.Future:
        return self.flow.activate(item_id)

    def deactivate(self, reason: str = "") -> asyncio.Future:
        return self.flow.deactivate(reason)

    def is_busy(self) -> bool:
        return self.sequencer.is_busy()

    def center_control_visible(self) -> bool:
        """Whether the "back to overview" control should show."""
        g = self.gestures.state
        return bool(
            self.flow.focused_id
            or self.viewport.is_off_base()
            or g.is_dragging
            or g.is_pinching
        )

    async def on_center_control(self) -> None:
        if self.flow.focused_id:
            await self.flow.deactivate("centerBtn")
        else:
            self.viewport.recenter()

    async def reset_all(self) -> bool:
        """Back to the fitted overview with the side panel open.

        Returns False without doing anything while a transition is running.
        """
        if self.is_busy():
            log.debug("session.reset_ignored", reason="busy")
            return False
        if self.flow.focused_id:
            await self.flow.deactivate("resetAll")
        else:
            self.info_panel.hide()
        self.viewport.fit(self._stage(), self._window())
        self.side_panel.reveal("user")
        log.info("session.reset")
        return True

    # ------------------------------------------------------------------ #
    # Resize
    # ------------------------------------------------------------------ #

    def on_resize(self) -> None:
        """Debounced stage-size change; call for every resize event."""
        loop = asyncio.get_running_loop()
        if self._resize_handle is not None:
            self._resize_handle.cancel()
        self._resize_handle = loop.call_later(
            self.settings.seconds(self.settings.resize_debounce_ms), self._start_resize
        )

    def _start_resize(self) -> None:
        self._resize_handle = None
        self._resize_task = asyncio.get_running_loop().create_task(self._apply_resize())

    async def _apply_resize(self) -> None:
        self.viewport.refit_preserving_view(self._stage(), self._window())
        focused = self.flow.focused_id
        if focused:
            await next_frame(1, self.settings.seconds(self.settings.frame_interval_ms))
            self.flow.focus_now(focused)
        log.debug("session.resized", stage=self._stage().model_dump(), refocused=focused)

    async def settle_resize(self) -> None:
        """Wait for a pending debounced resize, if any, to finish."""
        while self._resize_handle is not None:
            await asyncio.sleep(self.settings.seconds(self.settings.resize_debounce_ms))
        if self._resize_task is not None:
            await self._resize_task
