from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------
class Item(BaseModel):
    """An opaque tile item. Only its identity and order matter to the layout."""
    id: str = Field(..., min_length=1)
    index: int = Field(..., ge=0)
    title: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)

    @staticmethod
    def generated_id(index: int) -> str:
        """Stable per load, deterministic by position in the source list."""
        return f"C{index + 1:03d}"

    @classmethod
    def from_records(cls, records: Any) -> List["Item"]:
        """Normalize loosely shaped records into items, in their given order.

        Anything that is not a list yields no items; entries that are not
        dicts become empty payloads. Ids are always generated from position so
        they stay unique even when the source repeats or omits them.
        """
        if not isinstance(records, (list, tuple)):
            return []
        items: List[Item] = []
        for i, src in enumerate(records):
            payload = dict(src) if isinstance(src, dict) else {}
            title = str(payload.get("title") or "").strip() or f"Course {i + 1}"
            items.append(cls(id=cls.generated_id(i), index=i, title=title, payload=payload))
        return items


# ---------------------------------------------------------------------------
# Grid geometry
# ---------------------------------------------------------------------------
def y_key_of(q: int, r: float, odd: bool) -> float:
    """Screen-space row key of an axial cell: r + q/2 plus half a row for offset columns."""
    return r + q * 0.5 + (0.5 if odd else 0.0)


class AxialCoordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    q: int
    r: float
    odd: bool

    @computed_field  # type: ignore[misc]
    @property
    def y_key(self) -> float:
        return y_key_of(self.q, self.r, self.odd)

    @property
    def key(self) -> Tuple[int, float]:
        return (self.q, self.r)

    def sort_key(self) -> Tuple[float, int, float]:
        return (self.y_key, self.q, self.r)


class ShapeProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    H: int = Field(..., ge=0, description="Height of the centre (tallest) column")
    D: int = Field(..., ge=0, description="Columns on each side of the centre")

    @property
    def columns(self) -> int:
        return 2 * self.D + 1


class HeightProfile(BaseModel):
    shape: ShapeProfile
    heights: List[int]

    @property
    def total(self) -> int:
        return sum(self.heights)

    def is_lipschitz(self) -> bool:
        return all(abs(a - b) <= 1 for a, b in zip(self.heights, self.heights[1:]))

    def is_symmetric(self) -> bool:
        return self.heights == self.heights[::-1]


class GridExtent(BaseModel):
    """Bounding box of placed cells in grid units (q and y_key)."""
    model_config = ConfigDict(frozen=True)

    min_q: float
    max_q: float
    min_y: float
    max_y: float

    @property
    def col_span(self) -> float:
        return max(0.0, self.max_q - self.min_q)

    @property
    def row_span(self) -> float:
        return max(0.0, self.max_y - self.min_y)

    @property
    def center_q(self) -> float:
        return (self.min_q + self.max_q) / 2

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    @classmethod
    def empty(cls) -> "GridExtent":
        return cls(min_q=0, max_q=0, min_y=0, max_y=0)

    @classmethod
    def of(cls, positions: Iterable[AxialCoordinate]) -> "GridExtent":
        min_q = min_y = math.inf
        max_q = max_y = -math.inf
        for p in positions:
            min_q = min(min_q, p.q)
            max_q = max(max_q, p.q)
            min_y = min(min_y, p.y_key)
            max_y = max(max_y, p.y_key)
        if min_q == math.inf:
            return cls.empty()
        return cls(min_q=min_q, max_q=max_q, min_y=min_y, max_y=max_y)


class LayoutResult(BaseModel):
    positions: List[AxialCoordinate] = Field(default_factory=list)
    extent: GridExtent = Field(default_factory=GridExtent.empty)


# ---------------------------------------------------------------------------
# Pattern overlay
# ---------------------------------------------------------------------------
SkipRule = Literal["none", "first", "last"]


class PatternColumn(BaseModel):
    height: int = Field(0, ge=0)
    skip: SkipRule = "none"


class PatternSpec(BaseModel):
    columns: List[PatternColumn]
    middle_odd: Optional[bool] = None  # None => infer from N

    @property
    def col_count(self) -> int:
        return len(self.columns)


class PatternRef(BaseModel):
    """Object form of an overview entry: ``{"pattern": "3-4-{5}-4-3"}``."""
    model_config = ConfigDict(extra="allow")

    pattern: str


# ---------------------------------------------------------------------------
# Screen geometry & viewport
# ---------------------------------------------------------------------------
class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: "Point") -> "Point":
        return Point(x=(self.x + other.x) / 2, y=(self.y + other.y) / 2)


class Rect(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: float = 0.0
    top: float = 0.0
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(x=self.left + self.width / 2, y=self.top + self.height / 2)


class StageRect(Rect):
    """The container the tile layer is drawn in, in screen px."""

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0)


class WindowSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class Transform(BaseModel):
    model_config = ConfigDict(frozen=True)

    scale: float
    tx: float
    ty: float


class ViewportState(BaseModel):
    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0
    base_scale: float = 1.0
    base_tx: float = 0.0
    base_ty: float = 0.0
    min: float = 0.25
    max: float = 6.0
    info_bias_ty: float = 0.0

    def transform(self) -> Transform:
        return Transform(scale=self.scale, tx=self.tx, ty=self.ty)


class PanelState(BaseModel):
    is_collapsed: bool = False
    user_collapsed: bool = False
    auto_collapsed: bool = False


class FocusState(BaseModel):
    focused_id: Optional[str] = None


class GestureState(BaseModel):
    """Pointer bookkeeping of the gesture handler; not part of the view state."""
    pointers: Dict[int, Point] = Field(default_factory=dict)
    drag_start: Optional[Point] = None
    origin_tx: float = 0.0
    origin_ty: float = 0.0
    last_distance: float = 0.0
    # Tap candidate: where the gesture went down and on which tile
    down_at: Optional[Point] = None
    down_target: Optional[str] = None
    is_tap: bool = False
    is_dragging: bool = False
    is_pinching: bool = False
    is_moving: bool = False
