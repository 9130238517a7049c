import pytest

from hexview.exceptions import PatternSyntaxError
from hexview.services import pattern_overlay
from hexview.services.pattern_overlay import apply, emit, parse, parse_strict


def test_parse_odd_middle_marker():
    spec = parse_strict("3-4-{5}-4-3")
    assert [c.height for c in spec.columns] == [3, 4, 5, 4, 3]
    assert spec.middle_odd is True


def test_parse_even_middle_marker_and_skips():
    spec = parse_strict("2^t-[4]-2^b")
    assert spec.middle_odd is False
    assert [c.skip for c in spec.columns] == ["first", "none", "last"]


def test_unreadable_tokens_become_empty_columns():
    spec = parse_strict("3-x-3")
    assert [c.height for c in spec.columns] == [3, 0, 3]


@pytest.mark.parametrize("bad", ["", "---", "  -  "])
def test_parse_strict_rejects_patterns_without_columns(bad):
    with pytest.raises(PatternSyntaxError):
        parse_strict(bad)


@pytest.mark.parametrize("bad", [None, 123, ""])
def test_lenient_parse_returns_none(bad):
    assert parse(bad) is None


def test_exact_pattern_uses_no_padding(monkeypatch):
    def _no_padding(*a, **k):
        raise AssertionError("auto layout should not be consulted")

    monkeypatch.setattr(pattern_overlay, "generate", _no_padding)
    result = apply(19, parse("3-4-{5}-4-3"))
    assert len(result.positions) == 19
    assert [p.q for p in result.positions[:3]] == [-2, -2, -2]
    middle = [p for p in result.positions if p.q == 0]
    assert len(middle) == 5
    assert all(p.odd for p in middle)
    assert not any(p.odd for p in result.positions if abs(p.q) == 1)


def test_skip_bottom_then_pad_from_auto_layout():
    result = apply(6, parse("5^b"))
    keys = [p.key for p in result.positions]
    assert keys[:4] == [(0, -2.0), (0, -1.0), (0, 0.0), (0, 1.0)]
    assert keys[4:] == [(-1, -0.5), (0, -0.5)]
    assert len(set(keys)) == 6


def test_skip_top_drops_first_slot():
    cells = emit(4, parse("3^t"))
    assert [c.y_key for c in cells] == [0.0, 1.0]


def test_overflow_truncates_in_column_order():
    result = apply(3, parse("5-5"))
    assert [p.q for p in result.positions] == [0, 0, 0]
    assert [p.y_key for p in result.positions] == [-2.0, -1.0, 0.0]
    assert result.extent.min_y == -2.0
    assert result.extent.max_y == 0.0


def test_empty_overlay_returns_none():
    assert apply(4, parse("0-x")) is None


@pytest.mark.parametrize("pattern", ["2-3", "4^b-1", "{2}-2", "1-1-1", "3^t-3^b"])
def test_padded_layouts_never_repeat_a_cell(pattern):
    for n in range(1, 25):
        result = apply(n, parse(pattern))
        if result is None:
            continue
        keys = [p.key for p in result.positions]
        assert len(keys) == n
        assert len(set(keys)) == n
