from __future__ import annotations

"""hexview/services/viewport.py

Scale/translate state of the tile layer.

Transform model: a point at unscaled offset ``w`` from the layer centre is
drawn at ``screen = stage_center + t + scale * w``.  Everything here (fit,
zoom-at-anchor, pan, focus) keeps to that one formula, which is also what
:meth:`ViewportEngine.world_at` and :meth:`ViewportEngine.screen_of` invert.
"""

from typing import Optional, Tuple
import logging
import math

from hexview.config import Settings
from hexview.core_models import (
    GridExtent,
    Point,
    Rect,
    StageRect,
    Transform,
    ViewportState,
    WindowSize,
)
from hexview.services.layout_engine import LayoutEngine
from hexview.services.redraw import RedrawScheduler

log = logging.getLogger(__name__)

_EPS_SCALE = 0.001
_EPS_OFFSET = 1.0


def clamp(v: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, v))


class TileGeometry:
    """Pixel size of one tile and the pitch between neighbouring cells."""

    def __init__(self, settings: Settings) -> None:
        tri = settings.tile_half_height * settings.tile_triangle_ratio
        self.width = settings.tile_flat + tri * 2
        self.height = settings.tile_half_height * 2
        self.dx = self.width * 0.75 + settings.column_gap
        self.dy = self.height + settings.tile_spacing

    def grid_size(self, extent: GridExtent) -> Tuple[float, float]:
        return (
            max(1.0, self.width + self.dx * extent.col_span),
            max(1.0, self.height + self.dy * extent.row_span),
        )


class ViewportEngine:
    """Owns :class:`ViewportState` for one session."""

    def __init__(
        self,
        settings: Settings,
        layout: LayoutEngine,
        redraw: Optional[RedrawScheduler] = None,
    ) -> None:
        self.settings = settings
        self.layout = layout
        self.geometry = TileGeometry(settings)
        self.state = ViewportState(
            min=settings.min_scale_factor, max=settings.max_scale_factor
        )
        self.stage = StageRect(width=0, height=0)
        self.window = WindowSize(width=0, height=0)
        self.redraw = redraw or RedrawScheduler(self.transform)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def transform(self) -> Transform:
        return self.state.transform()

    @property
    def center(self) -> Point:
        return self.stage.center

    def _changed(self) -> None:
        self.redraw.request()

    def _clamp_scale(self, s: float) -> float:
        return clamp(s, self.state.min, self.state.max)

    def _padding(self) -> int:
        st = self.settings
        is_small = self.window.width < st.small_viewport_width
        floor = st.fit_padding_small if is_small else st.fit_padding_large
        cap = st.fit_padding_small_max if is_small else st.fit_padding_max
        ratio = 0.01 if is_small else 0.02
        return max(floor, min(cap, round(max(self.window.width, self.window.height) * ratio)))

    def measure(self) -> Tuple[float, float, float]:
        """Fit scale and scale bounds for the current stage: ``(base, min, max)``."""
        st = self.settings
        if self.stage.is_degenerate:
            base = 1.0
        else:
            pad = self._padding()
            grid_w, grid_h = self.geometry.grid_size(self.layout.extent)
            avail_w = max(self.stage.width - pad * 2, 1)
            avail_h = max(self.stage.height - pad * 2, 1)
            base = min(avail_w / grid_w, avail_h / grid_h)
            if not math.isfinite(base) or base <= 0:
                base = 1.0
        # The floor never rises above the fitted scale itself
        lo = min(base, max(st.min_scale_floor, base * st.min_scale_factor))
        hi = base * st.max_scale_factor
        return base, lo, hi

    def _set_stage(self, stage: StageRect, window: Optional[WindowSize]) -> None:
        self.stage = stage
        self.window = window if window is not None else WindowSize(width=stage.width, height=stage.height)

    # ------------------------------------------------------------------ #
    # Fit
    # ------------------------------------------------------------------ #

    def fit(self, stage: StageRect, window: Optional[WindowSize] = None) -> Transform:
        """Fit the whole grid into *stage* and reset the view to it."""
        self._set_stage(stage, window)
        base, lo, hi = self.measure()
        st = self.state
        st.base_scale, st.min, st.max = base, lo, hi
        st.scale = base
        st.tx = st.base_tx = 0.0
        st.ty = st.base_ty = 0.0
        st.info_bias_ty = -min(self.settings.info_bias_max, max(0.0, stage.height) * self.settings.info_bias_ratio)
        log.debug("[Viewport] fit base=%.4f min=%.4f max=%.4f", base, lo, hi)
        self._changed()
        return self.transform()

    def refit_preserving_view(self, stage: StageRect, window: Optional[WindowSize] = None) -> Transform:
        """Adopt a new stage size while keeping the user's zoom and pan proportional."""
        old_base = self.state.base_scale or 1.0
        s0 = self.state.scale or 1.0

        self._set_stage(stage, window)
        base, lo, hi = self.measure()
        st = self.state
        st.base_scale, st.min, st.max = base, lo, hi

        s1 = self._clamp_scale(s0 * (base / old_base))
        ratio = s1 / s0
        st.scale = s1
        st.tx *= ratio
        st.ty *= ratio
        log.debug("[Viewport] refit base %.4f -> %.4f, scale %.4f -> %.4f", old_base, base, s0, s1)
        self._changed()
        return self.transform()

    # ------------------------------------------------------------------ #
    # Zoom & pan
    # ------------------------------------------------------------------ #

    def zoom_at(self, anchor: Point, factor: float) -> float:
        """Multiply the scale by *factor*, keeping the layer point under *anchor* fixed."""
        st = self.state
        s0 = st.scale
        s1 = self._clamp_scale(s0 * factor)
        ratio = s1 / s0
        c = self.center
        st.tx = (1 - ratio) * (anchor.x - c.x) + ratio * st.tx
        st.ty = (1 - ratio) * (anchor.y - c.y) + ratio * st.ty
        st.scale = s1
        self._changed()
        return s1

    def wheel(self, anchor: Point, delta_y: float, ctrl_key: bool = False) -> float:
        k = self.settings.wheel_step_fine if ctrl_key else self.settings.wheel_step
        factor = (1 - k) if delta_y > 0 else (1 + k)
        return self.zoom_at(anchor, factor)

    def pinch(self, midpoint: Point, distance: float, last_distance: float) -> float:
        if distance <= 0 or last_distance <= 0:
            return self.state.scale
        return self.zoom_at(midpoint, distance / last_distance)

    def pan_from(self, origin_tx: float, origin_ty: float, dx: float, dy: float) -> None:
        """Offset the view from a drag-start snapshot; no incremental drift."""
        self.state.tx = origin_tx + dx
        self.state.ty = origin_ty + dy
        self._changed()

    # ------------------------------------------------------------------ #
    # Tiles & focus
    # ------------------------------------------------------------------ #

    def tile_offset(self, item_id: str) -> Optional[Point]:
        """Unscaled offset of a tile's centre from the layer centre."""
        pos = self.layout.position_of(item_id)
        if pos is None:
            return None
        ext = self.layout.extent
        return Point(
            x=(pos.q - ext.center_q) * self.geometry.dx,
            y=(pos.y_key - ext.center_y) * self.geometry.dy,
        )

    def tile_rect(self, item_id: str) -> Optional[Rect]:
        """On-screen rectangle of a tile under the current transform."""
        offset = self.tile_offset(item_id)
        if offset is None:
            return None
        s = self.state.scale
        centre = self.screen_of(offset)
        w, h = self.geometry.width * s, self.geometry.height * s
        return Rect(left=centre.x - w / 2, top=centre.y - h / 2, width=w, height=h)

    def focus(self, item_id: str) -> bool:
        """Zoom so the tile fills most of the stage and sits a third of the way down."""
        rect = self.tile_rect(item_id)
        if rect is None:
            log.debug("[Viewport] focus ignored for unknown item %s", item_id)
            return False

        st = self.state
        stage = self.stage
        c = self.center
        target = self.settings.focus_fill_ratio * min(stage.width, stage.height)
        s0 = st.scale
        larger = max(rect.width, rect.height)
        wanted = target / larger if larger > 0 else 1.0
        s1 = self._clamp_scale(s0 * wanted)

        tile_c = rect.center
        dest = Point(x=c.x, y=stage.top + stage.height * self.settings.focus_vertical_anchor)

        # The tile keeps its layer offset; solve for the translation that puts it at dest
        st.tx = dest.x - c.x - s1 * (tile_c.x - c.x - st.tx) / s0
        st.ty = dest.y - c.y - s1 * (tile_c.y - c.y - st.ty) / s0
        st.scale = s1
        self._changed()
        return True

    def recenter(self, with_info_bias: bool = False) -> Transform:
        st = self.state
        st.scale = st.base_scale
        st.tx = st.base_tx
        st.ty = st.info_bias_ty if with_info_bias else st.base_ty
        self._changed()
        return self.transform()

    def is_off_base(self) -> bool:
        st = self.state
        return (
            abs(st.scale - st.base_scale) > _EPS_SCALE
            or abs(st.tx - st.base_tx) > _EPS_OFFSET
            or abs(st.ty - st.base_ty) > _EPS_OFFSET
        )

    # ------------------------------------------------------------------ #
    # Coordinate conversion
    # ------------------------------------------------------------------ #

    def world_at(self, point: Point) -> Point:
        st, c = self.state, self.center
        return Point(x=(point.x - c.x - st.tx) / st.scale, y=(point.y - c.y - st.ty) / st.scale)

    def screen_of(self, world: Point) -> Point:
        st, c = self.state, self.center
        return Point(x=c.x + st.tx + st.scale * world.x, y=c.y + st.ty + st.scale * world.y)
