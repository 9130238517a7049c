from __future__ import annotations

"""hexview/services/panels.py

State of the two panels the focus flow coordinates with: the collapsible
side panel (the "dock" holding filters) and the item info panel.  Rendering
them is up to the host; the host fires the transition signals when the
panel's slide animation ends.
"""

from typing import Callable, List, Literal, Optional
import logging

from hexview.core_models import Item, PanelState
from hexview.services.settle import TransitionSignal

log = logging.getLogger(__name__)

PanelSource = Literal["user", "auto"]
Listener = Callable[[PanelState], None]


class SidePanel:
    """Collapsible panel that may overlap the stage.

    ``user_collapsed`` remembers that the user hid the panel themselves, so the
    focus flow never brings it back behind their back; ``auto_collapsed``
    marks a collapse done by the focus flow to make room for a tile.
    """

    def __init__(self, collapsed: bool = False) -> None:
        self.state = PanelState(is_collapsed=collapsed)
        # The panel slide and the workspace padding animate separately
        self.transition = TransitionSignal("side_panel")
        self.workspace_transition = TransitionSignal("workspace")
        self._listeners: List[Listener] = []

    @property
    def is_collapsed(self) -> bool:
        return self.state.is_collapsed

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state.model_copy())

    def collapse(self, source: PanelSource = "user") -> None:
        self.state.is_collapsed = True
        if source == "user":
            self.state.user_collapsed = True
            self.state.auto_collapsed = False
        else:
            self.state.auto_collapsed = True
        log.debug("[SidePanel] collapse source=%s state=%s", source, self.state.model_dump())
        self._notify()

    def reveal(self, source: PanelSource = "user") -> None:
        self.state.is_collapsed = False
        if source == "user":
            self.state.user_collapsed = False
        self.state.auto_collapsed = False
        log.debug("[SidePanel] reveal source=%s state=%s", source, self.state.model_dump())
        self._notify()

    def toggle(self) -> None:
        """User-facing toggle button."""
        if self.is_collapsed:
            self.reveal("user")
        else:
            self.collapse("user")


class InfoPanel:
    """Detail panel for the focused item."""

    def __init__(self) -> None:
        self.item: Optional[Item] = None
        self.is_open = False

    def show(self, item: Item) -> None:
        self.item = item
        self.is_open = True

    def hide(self) -> None:
        self.is_open = False
        self.item = None
