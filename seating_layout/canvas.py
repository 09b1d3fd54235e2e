from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from shapely.geometry import Point, Polygon, box
from shapely.ops import unary_union

from .model import Block, BlockType, Layout, Position


class GeometryError(Exception):
    pass


MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
ZOOM_STEP = 0.1

MIN_BLOCK_SIZE = 20.0

# Display metrics used to derive a seated grid's footprint.
SEAT_SIZE = 24.0
SEAT_GAP = 6.0
BLOCK_PADDING = 24.0
HEADER_HEIGHT = 32.0
DEFAULT_STANDING_SIZE = (220.0, 160.0)
DEFAULT_NON_SELLABLE_SIZE = (180.0, 120.0)
CANVAS_PADDING = 48.0


def _finite(*values: float) -> None:
    for v in values:
        if not math.isfinite(v):
            raise GeometryError(f"non-finite coordinate: {v}")


def clamp_zoom(zoom: float) -> float:
    _finite(zoom)
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def screen_to_logical(dx: float, dy: float, zoom: float) -> tuple[float, float]:
    _finite(dx, dy)
    z = clamp_zoom(zoom)
    return dx / z, dy / z


def moved(block: Block, dx: float, dy: float, zoom: float = 1.0) -> Block:
    """Copy of ``block`` dragged by a screen-pixel delta at the given zoom."""
    lx, ly = screen_to_logical(dx, dy, zoom)
    pos = Position(x=block.position.x + lx, y=block.position.y + ly)
    return block.model_copy(deep=True, update={"position": pos})


def sized(block: Block, width: float, height: float) -> Block:
    if not block.is_resizable:
        return block.model_copy(deep=True)
    _finite(width, height)
    return block.model_copy(
        deep=True,
        update={"width": max(MIN_BLOCK_SIZE, width), "height": max(MIN_BLOCK_SIZE, height)},
    )


def resized(block: Block, dw: float, dh: float, zoom: float = 1.0) -> Block:
    """Copy of ``block`` grown by a screen-pixel delta, floored at MIN_BLOCK_SIZE."""
    lw, lh = screen_to_logical(dw, dh, zoom)
    width, height = block_footprint(block)
    return sized(block, width + lw, height + lh)


def block_footprint(block: Block) -> tuple[float, float]:
    if block.width is not None and block.height is not None:
        return float(block.width), float(block.height)

    if block.type == BlockType.seated_grid:
        rows = block.rows or []
        n_rows = len(rows) or 1
        n_cols = max((len(r.seats) for r in rows), default=0) or 1
        width = n_cols * SEAT_SIZE + (n_cols - 1) * SEAT_GAP + BLOCK_PADDING
        height = n_rows * SEAT_SIZE + (n_rows - 1) * SEAT_GAP + BLOCK_PADDING + HEADER_HEIGHT
        return (
            float(block.width) if block.width is not None else width,
            float(block.height) if block.height is not None else height,
        )

    default_w, default_h = (
        DEFAULT_STANDING_SIZE if block.type == BlockType.standing_capacity else DEFAULT_NON_SELLABLE_SIZE
    )
    return (
        float(block.width) if block.width is not None else default_w,
        float(block.height) if block.height is not None else default_h,
    )


def block_box(block: Block) -> Polygon:
    w, h = block_footprint(block)
    x, y = block.position.x, block.position.y
    return box(x, y, x + max(0.0, w), y + max(0.0, h))


def layout_bounds(layout: Layout) -> Optional[tuple[float, float, float, float]]:
    if not layout.blocks:
        return None
    return tuple(unary_union([block_box(b) for b in layout.blocks]).bounds)


@dataclass(frozen=True)
class NormalizedLayout:
    layout: Layout
    content_width: float
    content_height: float
    canvas_width: float
    canvas_height: float
    padding: float


def normalize_layout(layout: Layout, padding: float = CANVAS_PADDING) -> NormalizedLayout:
    """
    Shift every block so the content's top-left corner sits at (padding, padding)
    and fill in each block's footprint, so viewers can size a canvas to fit.
    """
    bounds = layout_bounds(layout)
    if bounds is None:
        return NormalizedLayout(Layout(), 0.0, 0.0, padding * 2, padding * 2, padding)

    min_x, min_y, max_x, max_y = bounds
    blocks: list[Block] = []
    for b in layout.blocks:
        w, h = block_footprint(b)
        pos = Position(x=b.position.x - min_x + padding, y=b.position.y - min_y + padding)
        blocks.append(b.model_copy(deep=True, update={"position": pos, "width": w, "height": h}))

    content_w = max(0.0, max_x - min_x)
    content_h = max(0.0, max_y - min_y)
    return NormalizedLayout(
        layout=Layout(blocks=blocks),
        content_width=content_w,
        content_height=content_h,
        canvas_width=content_w + padding * 2,
        canvas_height=content_h + padding * 2,
        padding=padding,
    )


def block_at(layout: Layout, x: float, y: float) -> Optional[Block]:
    pt = Point(x, y)
    # Later blocks paint above earlier ones.
    for block in reversed(layout.blocks):
        if block_box(block).covers(pt):
            return block
    return None


def overlapping_blocks(layout: Layout) -> list[tuple[str, str]]:
    boxes = [(b.id, block_box(b)) for b in layout.blocks]
    out: list[tuple[str, str]] = []
    for i, (id_a, a) in enumerate(boxes):
        for id_b, b in boxes[i + 1 :]:
            if a.intersection(b).area > 0:
                out.append((id_a, id_b))
    return out


@dataclass
class Canvas:
    """Zoom state of the editing canvas. Changing zoom never moves blocks."""

    zoom: float = 1.0

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(round(self.zoom + ZOOM_STEP, 2))

    def zoom_out(self) -> float:
        return self.set_zoom(round(self.zoom - ZOOM_STEP, 2))

    def drag(self, block: Block, dx: float, dy: float) -> Block:
        return moved(block, dx, dy, self.zoom)

    def resize(self, block: Block, dw: float, dh: float) -> Block:
        return resized(block, dw, dh, self.zoom)
