# hexview/config.py
import os
import logging
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

log = logging.getLogger(__name__)

# Environment variables are read with this prefix, e.g. HEXVIEW_DOCK_TRANSITION_MS=300
ENV_PREFIX = "HEXVIEW_"


class Settings(BaseModel):
    """Tunables for layout geometry, viewport limits and transition timing."""

    # --- Scale limits (relative to the fitted base scale) ---
    min_scale_factor: float = 0.25
    max_scale_factor: float = 6.0
    min_scale_floor: float = 0.1

    # --- Fit padding (px) ---
    fit_padding_small: int = 8
    fit_padding_large: int = 30
    fit_padding_max: int = 80
    fit_padding_small_max: int = 30
    small_viewport_width: int = 600

    # --- Tile geometry (px, unscaled) ---
    tile_flat: float = 320.0
    tile_half_height: float = 140.0
    tile_spacing: float = 24.0
    column_gap: float = -105.0
    tile_triangle_ratio: float = 0.606

    # --- Focus ---
    focus_fill_ratio: float = Field(0.7, gt=0, le=1)
    focus_vertical_anchor: float = Field(1 / 3, ge=0, le=1)
    info_bias_ratio: float = 0.2
    info_bias_max: float = 400.0

    # --- Gestures ---
    wheel_step: float = 0.10
    wheel_step_fine: float = 0.04
    drag_threshold_px: float = 4.0
    tap_threshold_px: float = 6.0
    motion_settle_ms: int = 120

    # --- Transitions (ms) ---
    dock_transition_ms: int = 280
    layer_transition_ms: int = 280
    menu_delay_ms: int = 200
    resize_debounce_ms: int = 120
    frame_interval_ms: float = 1000 / 60

    def seconds(self, ms: float) -> float:
        return max(0.0, ms) / 1000.0


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip() != "":
            overrides[name] = raw.strip()
    return overrides


def load_settings(**explicit: Any) -> Settings:
    """Build :class:`Settings` from ``.env``/environment plus explicit overrides.

    Explicit keyword arguments win over the environment. Invalid environment
    values are logged and ignored rather than failing start-up.
    """
    load_dotenv()
    values = {**_env_overrides(), **explicit}
    try:
        return Settings(**values)
    except ValidationError as exc:
        log.warning("[Config] Ignoring invalid %s* environment values: %s", ENV_PREFIX, exc)
        return Settings(**explicit)
