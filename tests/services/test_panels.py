from hexview.core_models import Item
from hexview.services.panels import InfoPanel, SidePanel


def test_auto_collapse_then_auto_reveal():
    panel = SidePanel()
    panel.collapse("auto")
    assert panel.is_collapsed
    assert panel.state.auto_collapsed
    assert not panel.state.user_collapsed

    panel.reveal("auto")
    assert not panel.is_collapsed
    assert not panel.state.auto_collapsed


def test_user_collapse_is_remembered_until_user_reveal():
    panel = SidePanel()
    panel.collapse("auto")
    panel.collapse("user")
    assert panel.state.user_collapsed
    assert not panel.state.auto_collapsed

    panel.reveal("auto")
    assert panel.state.user_collapsed
    panel.toggle()
    assert panel.is_collapsed
    panel.toggle()
    assert not panel.is_collapsed
    assert not panel.state.user_collapsed


def test_listeners_get_snapshots():
    panel = SidePanel(collapsed=True)
    seen = []
    panel.subscribe(seen.append)
    panel.reveal()
    panel.collapse("auto")
    assert [s.is_collapsed for s in seen] == [False, True]
    assert seen[0] is not panel.state


def test_info_panel():
    info = InfoPanel()
    item = Item(id="C001", index=0, title="Course 1")
    info.show(item)
    assert info.is_open and info.item == item
    info.hide()
    assert not info.is_open and info.item is None
