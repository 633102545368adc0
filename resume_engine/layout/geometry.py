"""Pure geometry helpers over canvas-space rectangles.

Anything with ``x``, ``y``, ``width`` and ``height`` attributes works, so the
helpers accept elements, sections and plain ``Rect`` values alike.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, Protocol, Sequence, TypeVar

from resume_engine.schemas.layout import Rect

LINE_EPS = 20.0


class Positioned(Protocol):
    x: float
    y: float
    width: float
    height: float


T = TypeVar("T", bound=Positioned)


def contains_point(rect: Positioned, x: float, y: float) -> bool:
    return rect.x <= x <= rect.x + rect.width and rect.y <= y <= rect.y + rect.height


def overlaps(a: Positioned, b: Positioned) -> bool:
    return not (
        a.x + a.width < b.x
        or b.x + b.width < a.x
        or a.y + a.height < b.y
        or b.y + b.height < a.y
    )


def bounding_box(items: Iterable[Positioned]) -> Rect | None:
    items = list(items)
    if not items:
        return None
    min_x = min(item.x for item in items)
    min_y = min(item.y for item in items)
    max_x = max(item.x + item.width for item in items)
    max_y = max(item.y + item.height for item in items)
    return Rect(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def _sign(value: float) -> int:
    if value < 0:
        return -1
    if value > 0:
        return 1
    return 0


def reading_order_compare(a: Positioned, b: Positioned, line_eps: float = LINE_EPS) -> int:
    """Top-to-bottom, then left-to-right for items within ``line_eps`` of each other.

    Not transitive near the threshold: with three items whose y values
    straddle ``line_eps`` pairwise the result depends on the sort algorithm.
    Always sort with one ``sorted`` call (see ``sort_by_reading_order``).
    """
    if abs(a.y - b.y) < line_eps:
        return _sign(a.x - b.x)
    return _sign(a.y - b.y)


def sort_by_reading_order(items: Iterable[T], line_eps: float = LINE_EPS) -> list[T]:
    key = cmp_to_key(lambda a, b: reading_order_compare(a, b, line_eps))
    return sorted(items, key=key)


def find_topmost_containing(items: Sequence[T], x: float, y: float) -> T | None:
    # Later items are drawn on top of earlier ones.
    for item in reversed(items):
        if contains_point(item, x, y):
            return item
    return None
