from __future__ import annotations

"""hexview/services/pattern_overlay.py

Caller-supplied layout overrides for a specific item count.

A pattern lists column heights from left to right, separated by hyphens::

    "3-4-{5}-4-3"      five columns, centre column forced to the offset type
    "3-2-3-[4]-3-2-3"  seven columns, centre column forced to the plain type
    "5^b"              one 5-high column with its bottom slot left empty

``^t``/``^b`` leave the top/bottom slot of a column empty while keeping the
column aligned as if it were full height.  Tokens that are not a plain height
(with an optional skip suffix) become empty columns rather than errors.
"""

from typing import List, Optional, Set, Tuple
import logging
import re

from hexview.core_models import (
    AxialCoordinate,
    GridExtent,
    LayoutResult,
    PatternColumn,
    PatternSpec,
)
from hexview.exceptions import PatternSyntaxError
from hexview.services.positions import column_cells, default_middle_odd, generate, is_odd_column

log = logging.getLogger(__name__)

_COLUMN_RE = re.compile(r"^(\d+)(\^(t|b))?$")
_ODD_WRAP_RE = re.compile(r"^\{.+\}$")
_EVEN_WRAP_RE = re.compile(r"^\[.+\]$")

_SKIP_BY_SUFFIX = {"t": "first", "b": "last"}


def _parse_column(token: str) -> PatternColumn:
    m = _COLUMN_RE.match(token)
    if not m:
        log.debug("[PatternOverlay] Unreadable column token %r treated as empty", token)
        return PatternColumn(height=0)
    return PatternColumn(height=int(m.group(1)), skip=_SKIP_BY_SUFFIX.get(m.group(3), "none"))


def parse_strict(pattern: str) -> PatternSpec:
    """Parse *pattern*, raising :class:`PatternSyntaxError` when it has no column tokens."""
    if not isinstance(pattern, str):
        raise PatternSyntaxError(f"Pattern must be a string, got {type(pattern).__name__}")

    raw_tokens = [t.strip() for t in pattern.split("-")]
    raw_tokens = [t for t in raw_tokens if t]
    if not raw_tokens:
        raise PatternSyntaxError(f"Pattern {pattern!r} has no columns")

    middle_odd: Optional[bool] = None
    columns: List[PatternColumn] = []
    for tok in raw_tokens:
        if _ODD_WRAP_RE.match(tok):
            middle_odd = True
            tok = tok[1:-1].strip()
        elif _EVEN_WRAP_RE.match(tok):
            middle_odd = False
            tok = tok[1:-1].strip()
        columns.append(_parse_column(tok))

    return PatternSpec(columns=columns, middle_odd=middle_odd)


def parse(pattern: object) -> Optional[PatternSpec]:
    """Lenient form of :func:`parse_strict`: returns None instead of raising."""
    try:
        return parse_strict(pattern)  # type: ignore[arg-type]
    except PatternSyntaxError as exc:
        log.debug("[PatternOverlay] %s", exc)
        return None


def emit(n: int, spec: PatternSpec) -> List[AxialCoordinate]:
    """Cells of the overlay in column-major order, skip rules applied."""
    D = (spec.col_count - 1) // 2
    middle_odd = spec.middle_odd if spec.middle_odd is not None else default_middle_odd(n)

    positions: List[AxialCoordinate] = []
    for qi, col in enumerate(spec.columns):
        q = qi - D
        cells = list(column_cells(q, col.height, is_odd_column(q, middle_odd)))
        if col.skip == "first":
            cells = cells[1:]
        elif col.skip == "last":
            cells = cells[:-1]
        positions.extend(cells)
    return positions


def apply(n: int, spec: PatternSpec, default_odd: Optional[bool] = None) -> Optional[LayoutResult]:
    """Lay out *n* cells following *spec*, padding from the auto layout when short.

    Returns None when the overlay yields no cells at all so the caller can fall
    back to the auto layout.
    """
    manual = emit(n, spec)
    if not manual:
        log.info("[PatternOverlay] Pattern yields no cells for N=%d; ignoring it", n)
        return None

    if len(manual) >= n:
        # Author's column order wins; no re-sort
        used = manual[:n]
        return LayoutResult(positions=used, extent=GridExtent.of(used))

    need = n - len(manual)
    used_keys: Set[Tuple[int, float]] = {p.key for p in manual}
    if spec.middle_odd is not None:
        pad_parity = spec.middle_odd
    elif default_odd is not None:
        pad_parity = default_odd
    else:
        pad_parity = default_middle_odd(n)

    pad: List[AxialCoordinate] = []
    for p in generate(n, middle_odd=pad_parity).positions:
        if p.key in used_keys:
            continue
        pad.append(p)
        used_keys.add(p.key)
        if len(pad) == need:
            break

    # The auto layout has n distinct keys and at most len(manual) collide,
    # so the padding is always complete.
    combined = manual + pad
    log.debug("[PatternOverlay] N=%d: %d pattern cells + %d padded", n, len(manual), len(pad))
    return LayoutResult(positions=combined, extent=GridExtent.of(combined))
