from __future__ import annotations

"""hexview/services/focus_flow.py

The two sequenced transitions of the view: focusing a tile and clearing the
focus.  Both run through the :class:`~hexview.services.sequencer.Sequencer`
so their multi-step choreography (panel slide, re-measure, zoom, settle)
never interleaves.
"""

from typing import Callable, Dict, Optional
import asyncio

import structlog

from hexview.config import Settings
from hexview.core_models import FocusState, Item, StageRect, WindowSize
from hexview.services.panels import InfoPanel, SidePanel
from hexview.services.sequencer import Sequencer
from hexview.services.settle import TransitionSignal, next_frame, wait_all, wait_settle
from hexview.services.viewport import ViewportEngine

log = structlog.get_logger(__name__)

StageReader = Callable[[], StageRect]
WindowReader = Callable[[], WindowSize]


class FocusFlow:
    def __init__(
        self,
        settings: Settings,
        sequencer: Sequencer,
        viewport: ViewportEngine,
        side_panel: SidePanel,
        info_panel: InfoPanel,
        items_by_id: Dict[str, Item],
        read_stage: StageReader,
        read_window: Optional[WindowReader] = None,
        layer_transition: Optional[TransitionSignal] = None,
    ) -> None:
        self.settings = settings
        self.sequencer = sequencer
        self.viewport = viewport
        self.side_panel = side_panel
        self.info_panel = info_panel
        self.items_by_id = items_by_id
        self.read_stage = read_stage
        self.read_window = read_window
        self.layer_transition = layer_transition or TransitionSignal("layer")
        self.focus = FocusState()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def focused_id(self) -> Optional[str]:
        return self.focus.focused_id

    def is_busy(self) -> bool:
        return self.sequencer.is_busy()

    def activate(self, item_id: str) -> asyncio.Future:
        """Queue "focus *item_id*"; the future resolves once the zoom has settled."""
        return self.sequencer.enqueue(lambda: self._activate(item_id), kind="activate")

    def deactivate(self, reason: str = "") -> asyncio.Future:
        """Queue "clear focus"; *reason* only tags the log line."""
        return self.sequencer.enqueue(lambda: self._deactivate(reason), kind="deactivate")

    # ------------------------------------------------------------------ #
    # Immediate (unsequenced) steps, also used by resize handling
    # ------------------------------------------------------------------ #

    def focus_now(self, item_id: str) -> bool:
        if not self.viewport.focus(item_id):
            return False
        self.focus.focused_id = item_id
        item = self.items_by_id.get(item_id)
        if item is not None:
            self.info_panel.show(item)
        return True

    def clear_focus(self) -> None:
        self.focus.focused_id = None
        self.info_panel.hide()

    # ------------------------------------------------------------------ #
    # Task bodies
    # ------------------------------------------------------------------ #

    def _ms(self, ms: float) -> float:
        return self.settings.seconds(ms)

    async def _frames(self, n: int) -> None:
        await next_frame(n, self._ms(self.settings.frame_interval_ms))

    async def _wait_panel_and_workspace(self) -> None:
        dock_ms = self.settings.dock_transition_ms
        await wait_all([
            (self.side_panel.transition, self._ms(dock_ms + 80)),
            (self.side_panel.workspace_transition, self._ms(dock_ms + 120)),
        ])
        await self._frames(2)

    async def _ensure_stable_stage(self) -> None:
        # Same path whether or not the panel was open, so in-flight slides settle too
        if not self.side_panel.is_collapsed:
            self.side_panel.collapse("auto")
        await self._wait_panel_and_workspace()

        window = self.read_window() if self.read_window else None
        self.viewport.refit_preserving_view(self.read_stage(), window)
        await self._frames(2)

    async def _activate(self, item_id: str) -> None:
        if self.viewport.tile_offset(item_id) is None:
            log.info("focus.activate_ignored", item_id=item_id, reason="unknown_item")
            return

        log.info("focus.activate", item_id=item_id)
        await self._ensure_stable_stage()
        self.focus_now(item_id)
        await wait_settle(self.layer_transition, self._ms(self.settings.layer_transition_ms + 60))

    async def _deactivate(self, reason: str) -> None:
        panel_visible = not self.side_panel.is_collapsed
        was_auto_collapsed = self.side_panel.state.auto_collapsed

        log.info("focus.deactivate", reason=reason, focused=self.focus.focused_id)
        self.clear_focus()
        self.viewport.recenter(with_info_bias=False)
        await wait_settle(self.layer_transition, self._ms(self.settings.layer_transition_ms + 60))
        await asyncio.sleep(self._ms(self.settings.menu_delay_ms))

        if not panel_visible and was_auto_collapsed and not self.side_panel.state.user_collapsed:
            self.side_panel.reveal("auto")
            await wait_settle(self.side_panel.transition, self._ms(self.settings.dock_transition_ms + 80))
