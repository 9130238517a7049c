import pytest

from hexview.config import Settings
from hexview.core_models import Item, StageRect, WindowSize
from hexview.services.layout_engine import LayoutEngine
from hexview.services.viewport import ViewportEngine
from hexview.session import HexSession

STAGE = StageRect(left=0, top=0, width=1000, height=800)


def make_items(n):
    return Item.from_records([{"title": f"Item {i}"} for i in range(n)])


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fast_settings():
    # Millisecond timings so sequenced transitions finish quickly
    return Settings(
        dock_transition_ms=1,
        layer_transition_ms=1,
        menu_delay_ms=1,
        resize_debounce_ms=5,
        motion_settle_ms=5,
        frame_interval_ms=1,
    )


@pytest.fixture
def stage():
    return STAGE


@pytest.fixture
def layout7():
    engine = LayoutEngine()
    engine.apply_layout(make_items(7))
    return engine


@pytest.fixture
def viewport7(settings, layout7, stage):
    vp = ViewportEngine(settings, layout7)
    vp.fit(stage, WindowSize(width=stage.width, height=stage.height))
    return vp


@pytest.fixture
def make_session(fast_settings):
    """Factory for sessions over a mutable stage box."""
    def _make(n=7, stage=STAGE, **kwargs):
        box = {"stage": stage}
        session = HexSession(
            make_items(n),
            settings=kwargs.pop("settings", fast_settings),
            read_stage=lambda: box["stage"],
            **kwargs,
        )
        session.stage_box = box
        return session
    return _make
