from __future__ import annotations

"""hexview/services/height_profile.py

Turns the solver's (H, D) shape into one height per column that sums to N.

The builder starts from the strict slope and spends the surplus by raising
symmetric column pairs, nearest to the centre first.  Each successful pass
consumes exactly two tiles of surplus and a pass that raises nothing ends the
loop, so the loop runs at most ``extra / 2`` passes.  ``_MAX_PASSES`` only
guards against that argument being broken by a future change.
"""

from typing import List
import logging

from hexview.core_models import HeightProfile, ShapeProfile
from hexview.services.shape_solver import solve

log = logging.getLogger(__name__)

_MAX_PASSES = 20000


def can_raise(heights: List[int], i: int, new_height: int) -> bool:
    """True when column *i* may grow to *new_height* without a step > 1 to a neighbour."""
    if i - 1 >= 0 and new_height - heights[i - 1] > 1:
        return False
    if i + 1 < len(heights) and new_height - heights[i + 1] > 1:
        return False
    return True


def _raise_nearest_pair(heights: List[int], H: int, D: int) -> bool:
    mid = D
    for d in range(1, D + 1):
        i, j = mid - d, mid + d
        if heights[i] >= H or heights[j] >= H:
            continue
        if not can_raise(heights, i, heights[i] + 1):
            continue
        if not can_raise(heights, j, heights[j] + 1):
            continue
        heights[i] += 1
        heights[j] += 1
        return True
    return False


def build(n: int) -> HeightProfile:
    shape = solve(n)
    H, D = shape.H, shape.D

    heights = [H - abs(i - D) for i in range(shape.columns)]
    extra = n - sum(heights)

    passes = 0
    while extra >= 2:
        if passes >= _MAX_PASSES:
            log.error("[HeightProfile] Pass limit hit for N=%d with %d left over", n, extra)
            break
        passes += 1
        if not _raise_nearest_pair(heights, H, D):
            break
        extra -= 2

    if sum(heights) != n:
        # Degenerate small counts: one column holding everything
        count = max(1, n)
        log.debug("[HeightProfile] Profile for N=%d did not close; using single column", n)
        return HeightProfile(shape=ShapeProfile(H=count, D=0), heights=[count])

    return HeightProfile(shape=shape, heights=heights)
