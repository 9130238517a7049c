from __future__ import annotations

"""hexview/services/positions.py

Converts column heights into axial cells.

Each column is centred in screen-space row keys (``y_key``) and ``r`` is
derived back from the key, because the renderer draws a cell at
``(r + q/2) * row_pitch`` plus half a row for offset columns.  Centring in
``r`` instead would skew every column by ``q/2``.
"""

from typing import Iterator, List, Optional
import logging

from hexview.core_models import AxialCoordinate, GridExtent, LayoutResult
from hexview.services.height_profile import build

log = logging.getLogger(__name__)


def default_middle_odd(n: int) -> bool:
    """Odd counts get an offset centre column, even counts a plain one."""
    return n % 2 == 1


def is_odd_column(q: int, middle_odd: bool) -> bool:
    return (abs(q) + (1 if middle_odd else 0)) % 2 == 1


def column_cells(q: int, height: int, odd: bool) -> Iterator[AxialCoordinate]:
    """Yield the *height* cells of column *q*, top to bottom, centred on y_key 0."""
    y_start = -((height - 1) / 2)
    odd_term = 0.5 if odd else 0.0
    for k in range(height):
        y_key = y_start + k
        r = y_key - q * 0.5 - odd_term
        yield AxialCoordinate(q=q, r=r, odd=odd)


def generate(n: int, middle_odd: Optional[bool] = None) -> LayoutResult:
    """Place *n* cells in the auto-fitted silhouette, ordered top-left to bottom-right."""
    if n <= 0:
        return LayoutResult()

    if middle_odd is None:
        middle_odd = default_middle_odd(n)

    profile = build(n)
    D = profile.shape.D

    positions: List[AxialCoordinate] = []
    for i, height in enumerate(profile.heights):
        q = i - D
        positions.extend(column_cells(q, height, is_odd_column(q, middle_odd)))

    positions.sort(key=AxialCoordinate.sort_key)
    used = positions[:n]

    log.debug("[Positions] N=%d heights=%s middle_odd=%s", n, profile.heights, middle_odd)
    return LayoutResult(positions=used, extent=GridExtent.of(used))
