import pytest

from hexview.core_models import Point, StageRect
from hexview.services.gestures import WheelEvent
from hexview.session import HexSession


@pytest.mark.asyncio
async def test_session_from_raw_records(fast_settings):
    applied = []
    session = HexSession(
        records=[{"title": "Algebra"}, {"title": "Geometry"}, "bad", {}],
        overview={"4": "2-2"},
        settings=fast_settings,
        read_stage=lambda: StageRect(width=900, height=700),
        on_apply=applied.append,
    )
    assert [it.id for it in session.items] == ["C001", "C002", "C003", "C004"]
    assert session.items[3].title == "Course 4"
    assert [session.layout.position_of(f"C00{i}").q for i in range(1, 5)] == [0, 0, 1, 1]

    await session.initial_fit()
    assert applied
    assert applied[-1] == session.viewport.transform()


@pytest.mark.asyncio
async def test_center_control_visibility(make_session):
    session = make_session()
    await session.initial_fit()
    assert not session.center_control_visible()

    session.gestures.on_wheel(WheelEvent(x=100, y=100, delta_y=-1))
    assert session.center_control_visible()

    await session.on_center_control()
    assert not session.center_control_visible()

    await session.activate("C001")
    assert session.center_control_visible()
    await session.on_center_control()
    assert session.focused_id is None
    assert not session.center_control_visible()


@pytest.mark.asyncio
async def test_reset_all_restores_overview_and_panel(make_session):
    session = make_session()
    await session.initial_fit()
    await session.activate("C006")
    session.side_panel.collapse("user")

    assert await session.reset_all() is True
    assert session.focused_id is None
    assert not session.viewport.is_off_base()
    assert not session.side_panel.is_collapsed
    assert not session.side_panel.state.user_collapsed


@pytest.mark.asyncio
async def test_reset_all_without_focus_hides_info(make_session):
    session = make_session()
    await session.initial_fit()
    session.viewport.zoom_at(Point(x=10, y=10), 2)
    session.info_panel.show(session.items[0])

    assert await session.reset_all() is True
    assert not session.info_panel.is_open
    assert not session.viewport.is_off_base()


@pytest.mark.asyncio
async def test_reset_all_ignored_while_busy(make_session):
    session = make_session()
    await session.initial_fit()
    fut = session.activate("C002")
    assert await session.reset_all() is False
    await fut
    assert session.focused_id == "C002"


@pytest.mark.asyncio
async def test_resize_is_debounced_and_preserves_zoom(make_session):
    session = make_session()
    await session.initial_fit()
    vp = session.viewport
    vp.zoom_at(vp.center, 1.5)
    rel = vp.state.scale / vp.state.base_scale
    refits = []
    real_refit = vp.refit_preserving_view

    def _spy(stage, window=None):
        refits.append(stage)
        return real_refit(stage, window)

    vp.refit_preserving_view = _spy

    for w in (1100, 1200, 1300):
        session.stage_box["stage"] = StageRect(width=w, height=900)
        session.on_resize()
    await session.settle_resize()

    assert [s.width for s in refits] == [1300]
    assert vp.state.scale / vp.state.base_scale == pytest.approx(rel)


@pytest.mark.asyncio
async def test_resize_refocuses_the_focused_tile(make_session):
    session = make_session()
    await session.initial_fit()
    await session.activate("C002")

    stage = StageRect(left=50, top=20, width=1300, height=1000)
    session.stage_box["stage"] = stage
    session.on_resize()
    await session.settle_resize()

    rect = session.viewport.tile_rect("C002")
    assert rect.center.x == pytest.approx(stage.left + stage.width / 2)
    assert rect.center.y == pytest.approx(stage.top + stage.height / 3)
    assert session.info_panel.item.id == "C002"


@pytest.mark.asyncio
async def test_sessions_are_independent(make_session):
    a, b = make_session(), make_session(n=3)
    await a.initial_fit()
    await b.initial_fit()
    await a.activate("C001")
    assert b.focused_id is None
    assert not b.gate.locked
