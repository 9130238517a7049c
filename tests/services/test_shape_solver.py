import pytest

from hexview.services import shape_solver
from hexview.services.shape_solver import base_sum, brackets, max_sum, solve


def test_bracket_bounds():
    # Strict slope 2-3-2 and plateau 3-3-3
    assert base_sum(3, 1) == 7
    assert max_sum(3, 1) == 9
    assert brackets(8, 3, 1)
    assert not brackets(10, 3, 1)


@pytest.mark.parametrize(
    "n,expected",
    [
        (2, (2, 0)),
        (4, (2, 1)),
        (6, (2, 1)),
        (7, (3, 1)),
        (19, (5, 2)),
    ],
)
def test_solve_known_counts(n, expected):
    shape = solve(n)
    assert (shape.H, shape.D) == expected


def test_solve_single_item_falls_back_to_one_cell():
    shape = solve(1)
    assert (shape.H, shape.D) == (1, 0)


def test_solve_non_positive_count(caplog):
    shape = solve(0)
    assert (shape.H, shape.D) == (1, 0)
    assert "Non-positive" in caplog.text


@pytest.mark.parametrize("n", range(2, 120))
def test_solved_shape_brackets_n_and_matches_parity(n):
    shape = solve(n)
    if shape.D == 0 and shape.H == n:
        return
    assert brackets(n, shape.H, shape.D)
    assert shape.H % 2 == n % 2


def test_ties_keep_first_candidate(monkeypatch):
    monkeypatch.setattr(shape_solver, "score", lambda n, H, D: 1.0)
    shape = solve(7)
    # H=3 is the first height with a bracketing shape
    assert shape.H == 3
