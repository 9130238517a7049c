import asyncio

import pytest

from hexview.services.gestures import KeyEvent, PointerEvent, WheelEvent


def _down(pid, x, y, target=None, button=0):
    return PointerEvent(pointer_id=pid, x=x, y=y, target_id=target, button=button)


@pytest.mark.asyncio
async def test_drag_pans_from_snapshot(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures

    g.on_pointer_down(_down(1, 100, 100))
    g.on_pointer_move(_down(1, 102, 101))
    assert not g.state.is_dragging
    g.on_pointer_move(_down(1, 150, 130))
    assert g.state.is_dragging
    assert (session.viewport.state.tx, session.viewport.state.ty) == (50, 30)
    assert session.center_control_visible()

    assert g.on_pointer_up(_down(1, 150, 130)) is None
    assert not g.state.is_dragging


@pytest.mark.asyncio
async def test_tap_on_tile_toggles_focus(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures

    g.on_pointer_down(_down(1, 400, 300, target="C002"))
    fut = g.on_pointer_up(_down(1, 402, 301))
    await fut
    assert session.focused_id == "C002"

    g.on_pointer_down(_down(1, 500, 260, target="C002"))
    await g.on_pointer_up(_down(1, 500, 260))
    assert session.focused_id is None


@pytest.mark.asyncio
async def test_tap_on_empty_space_deactivates(make_session):
    session = make_session()
    await session.initial_fit()
    await session.activate("C001")
    g = session.gestures

    g.on_pointer_down(_down(1, 10, 10))
    await g.on_pointer_up(_down(1, 10, 10))
    assert session.focused_id is None


@pytest.mark.asyncio
async def test_drift_past_tap_threshold_is_empty_tap(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures
    activate_calls = []
    session.flow.activate = lambda item_id: activate_calls.append(item_id)

    g.on_pointer_down(_down(1, 400, 300, target="C002"))
    # Up without intermediate moves, but 7px away
    fut = g.on_pointer_up(_down(1, 407, 300))
    await fut
    assert activate_calls == []


@pytest.mark.asyncio
async def test_pinch_zooms_then_hands_off_to_drag(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures
    vp = session.viewport
    s0 = vp.state.scale

    g.on_pointer_down(_down(1, 400, 400))
    g.on_pointer_down(_down(2, 600, 400))
    assert g.state.is_pinching
    g.on_pointer_move(_down(2, 800, 400))
    assert vp.state.scale == pytest.approx(s0 * 2)

    assert g.on_pointer_up(_down(2, 800, 400)) is None
    assert not g.state.is_pinching
    tx0 = vp.state.tx
    g.on_pointer_move(_down(1, 420, 400))
    assert vp.state.tx == pytest.approx(tx0 + 20)

    assert g.on_pointer_up(_down(1, 420, 400)) is None
    assert session.focused_id is None


@pytest.mark.asyncio
async def test_wheel_bumps_motion_flag(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures

    assert g.on_wheel(WheelEvent(x=500, y=400, delta_y=-100))
    assert g.state.is_moving
    await asyncio.sleep(0.05)
    assert not g.state.is_moving


@pytest.mark.asyncio
async def test_locked_gate_ignores_input(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures
    session.gate.set(True)
    s0 = session.viewport.state.scale

    assert g.on_wheel(WheelEvent(x=500, y=400, delta_y=-100)) is False
    g.on_pointer_down(_down(1, 100, 100))
    assert g.state.pointers == {}
    assert g.on_key(KeyEvent(key="Enter", target_id="C001")) is None
    assert session.viewport.state.scale == s0


@pytest.mark.asyncio
async def test_secondary_button_is_ignored(make_session):
    session = make_session()
    g = session.gestures
    g.on_pointer_down(_down(1, 100, 100, button=2))
    assert g.state.pointers == {}


@pytest.mark.asyncio
async def test_keyboard_toggle_and_escape(make_session):
    session = make_session()
    await session.initial_fit()
    g = session.gestures

    await g.on_key(KeyEvent(key="Enter", target_id="C003"))
    assert session.focused_id == "C003"
    await g.on_key(KeyEvent(key=" ", target_id="C003"))
    assert session.focused_id is None

    await g.on_key(KeyEvent(key=" ", target_id="C004"))
    await g.on_key(KeyEvent(key="Escape"))
    assert session.focused_id is None
    assert g.on_key(KeyEvent(key="Escape")) is None
    assert g.on_key(KeyEvent(key="a", target_id="C001")) is None
