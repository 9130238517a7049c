from __future__ import annotations

"""hexview/services/shape_solver.py

Picks the (H, D) diamond that N tiles are laid out in.

``H`` is the height of the centre column and ``D`` the number of columns on
either side of it.  For a given shape the smallest count it can hold is the
strict slope (every column one shorter than its inner neighbour) and the
largest is the plateau (every column at ``H``).  Any N between the two can be
reached by the height-profile builder, so the solver only has to choose the
best-looking bracket.
"""

from typing import Optional, Tuple
import logging
import math

from hexview.core_models import ShapeProfile

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
#  Cost weights
# --------------------------------------------------------------------------- #

_W_COMPACT = 12.0    # (H - sqrt(N + 2))^2
_W_TRUNCATE = 2.5    # (D - max(0, H - 2))^2
_W_COLUMNS = 0.08    # 2D + 1
_W_HEIGHT = 0.04     # H


def base_sum(H: int, D: int) -> int:
    """Tile count of the strict slope: sum of H - |q| for q in [-D, D]."""
    return (2 * D + 1) * H - D * (D + 1)


def max_sum(H: int, D: int) -> int:
    """Tile count with every column at the full height H."""
    return (2 * D + 1) * H


def brackets(n: int, H: int, D: int) -> bool:
    return base_sum(H, D) <= n <= max_sum(H, D)


def score(n: int, H: int, D: int) -> float:
    root = math.sqrt(n + 2)
    prefer_d = max(0, H - 2)
    return (
        (H - root) ** 2 * _W_COMPACT
        + (D - prefer_d) ** 2 * _W_TRUNCATE
        + (2 * D + 1) * _W_COLUMNS
        + H * _W_HEIGHT
    )


def solve(n: int) -> ShapeProfile:
    """Return the lowest-cost shape whose count range contains *n*."""
    if n < 1:
        log.warning("[ShapeSolver] Non-positive item count %s; using a single cell", n)
        return ShapeProfile(H=1, D=0)

    parity = n % 2
    best: Optional[Tuple[float, int, int]] = None

    for H in range(2, max(2, n) + 1):
        if H % 2 != parity:
            continue

        # More diamond-like first, then narrower
        for D in range(max(0, H - 2), -1, -1):
            if brackets(n, H, D):
                s = score(n, H, D)
                if best is None or s < best[0]:
                    best = (s, H, D)
                break

        # The full diamond (single-cell edges)
        d_full = max(0, H - 1)
        if brackets(n, H, d_full):
            s = score(n, H, d_full)
            if best is None or s < best[0]:
                best = (s, H, d_full)

    if best is None:
        log.debug("[ShapeSolver] No bracketing shape for N=%d; single column", n)
        return ShapeProfile(H=n, D=0)

    _, H, D = best
    log.debug("[ShapeSolver] N=%d -> H=%d D=%d (cost %.3f)", n, H, D, best[0])
    return ShapeProfile(H=H, D=D)
