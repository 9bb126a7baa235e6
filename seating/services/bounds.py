"""Canvas bounds for a floor layout"""

from dataclasses import dataclass, asdict
from typing import Iterable

TABLE_DIAMETER = 80
TABLE_RADIUS = TABLE_DIAMETER / 2
CANVAS_MARGIN = 200
MIN_CANVAS_WIDTH = 800
MIN_CANVAS_HEIGHT = 600


@dataclass(frozen=True)
class LayoutBounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    width: float
    height: float

    def as_dict(self) -> dict:
        return asdict(self)


def compute_layout_bounds(sections: Iterable) -> LayoutBounds:
    """
    Bounding box over every seat center and every table footprint.

    Each section needs ``offset_x``, ``offset_y``, ``section_type`` and
    ``seats`` (objects with ``position_x``/``position_y``). A seat's absolute
    position is its section offset plus its relative position; a ``table``
    section also contributes a circle of ``TABLE_DIAMETER`` centered on its
    offset. The margin is added once to each dimension and the result is
    clamped to the minimum canvas size. No sections means the minimum canvas.
    """
    xs = []
    ys = []

    for section in sections:
        ox = section.offset_x or 0
        oy = section.offset_y or 0
        for seat in section.seats:
            xs.append(ox + (seat.position_x or 0))
            ys.append(oy + (seat.position_y or 0))
        if section.section_type == "table":
            xs.extend((ox - TABLE_RADIUS, ox + TABLE_RADIUS))
            ys.extend((oy - TABLE_RADIUS, oy + TABLE_RADIUS))

    if not xs:
        return LayoutBounds(
            min_x=0,
            max_x=0,
            min_y=0,
            max_y=0,
            width=MIN_CANVAS_WIDTH,
            height=MIN_CANVAS_HEIGHT,
        )

    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    return LayoutBounds(
        min_x=min_x,
        max_x=max_x,
        min_y=min_y,
        max_y=max_y,
        width=max(max_x - min_x + CANVAS_MARGIN, MIN_CANVAS_WIDTH),
        height=max(max_y - min_y + CANVAS_MARGIN, MIN_CANVAS_HEIGHT),
    )
