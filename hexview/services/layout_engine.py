from __future__ import annotations

"""hexview/services/layout_engine.py

Public entry point of the grid layout.  Runs once per item-set load: picks
the auto layout or a matching pattern override from the overview mapping and
assigns one axial cell to each item in its given order.
"""

from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from pydantic import TypeAdapter, ValidationError

from hexview.core_models import AxialCoordinate, GridExtent, Item, LayoutResult, PatternRef, PatternSpec
from hexview.exceptions import LayoutInputError
from hexview.services import pattern_overlay as _overlay
from hexview.services.positions import default_middle_odd, generate

log = logging.getLogger(__name__)

OverviewEntry = Union[str, PatternRef]
_ENTRY_ADAPTER: TypeAdapter[OverviewEntry] = TypeAdapter(OverviewEntry)


def pattern_for(overview: Optional[Mapping[str, Any]], n: int) -> Optional[str]:
    """Return the pattern string registered for *n*, or None.

    Entries may be a bare string or ``{"pattern": "..."}``; any other shape is
    ignored with a warning.
    """
    if not overview:
        return None
    raw = overview.get(str(n))
    if raw is None:
        return None
    try:
        entry = _ENTRY_ADAPTER.validate_python(raw)
    except ValidationError:
        log.warning("[Layout] Overview entry for N=%d is neither a string nor {pattern}; ignoring", n)
        return None
    return entry if isinstance(entry, str) else entry.pattern


def layout_for_count(n: int, overview: Optional[Mapping[str, Any]] = None) -> LayoutResult:
    """Auto layout for *n*, replaced by the overview pattern when one applies."""
    default_odd = default_middle_odd(n)
    result = generate(n, middle_odd=default_odd)

    pattern = pattern_for(overview, n)
    spec: Optional[PatternSpec] = _overlay.parse(pattern) if pattern is not None else None
    if pattern is not None and spec is None:
        log.warning("[Layout] Pattern %r for N=%d could not be parsed; using auto layout", pattern, n)
    if spec is not None:
        manual = _overlay.apply(n, spec, default_odd=default_odd)
        if manual is not None:
            log.info("[Layout] Using pattern %r for N=%d", pattern, n)
            result = manual
    return result


class LayoutEngine:
    """Owns the per-item cells and the grid extent of one item set."""

    def __init__(self, overview: Optional[Mapping[str, Any]] = None) -> None:
        self.overview: Dict[str, Any] = dict(overview or {})
        self.positions_by_id: Dict[str, AxialCoordinate] = {}
        self.extent: GridExtent = GridExtent.empty()
        self._items: List[Item] = []

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    def apply_layout(self, items: List[Item]) -> GridExtent:
        """Assign a cell to every item (index for index) and return the extent."""
        ids = [it.id for it in items]
        if len(set(ids)) != len(ids):
            # Every item still gets a cell; lookups by id see the last one
            log.warning("[Layout] %d duplicate item ids; later items shadow earlier ones", len(ids) - len(set(ids)))

        n = len(items)
        result = layout_for_count(n, self.overview)
        if len(result.positions) != n:
            # Every path above yields exactly n cells
            raise LayoutInputError(f"Layout produced {len(result.positions)} cells for {n} items")

        self._items = list(items)
        self.positions_by_id = {it.id: pos for it, pos in zip(items, result.positions)}
        self.extent = result.extent
        log.debug("[Layout] Placed %d items; extent=%s", n, self.extent.model_dump())
        return self.extent

    def position_of(self, item_id: str) -> Optional[AxialCoordinate]:
        return self.positions_by_id.get(item_id)
