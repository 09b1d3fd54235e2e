from __future__ import annotations

from typing import Optional

from loguru import logger

from .canvas import Canvas, moved, resized, sized
from .grid import build_rows, new_block_id, representative_seats
from .model import (
    Block,
    BlockType,
    Layout,
    LayoutError,
    Position,
    SessionSeatingMapRequest,
    clone_layout,
    find_block,
    stamp_standing_tier,
)


DEFAULT_POSITION = (50.0, 50.0)
DEFAULT_GRID = (5, 10)
DEFAULT_CAPACITY = 100
DEFAULT_SIZE = (200.0, 100.0)


def default_name(block_type: BlockType) -> str:
    return "New " + block_type.value.replace("_", " ")


def new_block(block_type: BlockType, *, block_id: Optional[str] = None, name: Optional[str] = None) -> Block:
    block_type = BlockType(block_type)
    block_id = block_id or new_block_id()
    block = Block(
        id=block_id,
        name=name or default_name(block_type),
        type=block_type,
        position=Position(x=DEFAULT_POSITION[0], y=DEFAULT_POSITION[1]),
    )
    _apply_type_defaults(block)
    return block


def _apply_type_defaults(block: Block, *, keep_size: bool = False) -> None:
    size = (block.width, block.height)
    block.rows = None
    block.seats = None
    block.capacity = None
    block.width = None
    block.height = None
    block.tier_id = None

    if block.type == BlockType.seated_grid:
        rows, cols = DEFAULT_GRID
        block.rows = build_rows(block.id, rows, cols)
        return

    if keep_size and size[0] is not None and size[1] is not None:
        block.width, block.height = size
    else:
        block.width, block.height = DEFAULT_SIZE
    if block.type == BlockType.standing_capacity:
        block.capacity = DEFAULT_CAPACITY
        block.seats = representative_seats(block.id)


def _replace(layout: Layout, block: Block) -> Layout:
    block = block.model_copy(deep=True)
    if block.type == BlockType.standing_capacity:
        stamp_standing_tier(block)
    new_layout = clone_layout(layout)
    new_layout.blocks = [block if b.id == block.id else b for b in new_layout.blocks]
    return new_layout


def _edit(layout: Layout, block_id: str, fn) -> Layout:
    block = find_block(layout, block_id)
    if block is None:
        return clone_layout(layout)
    return _replace(layout, fn(block))


def add_block(layout: Layout, block_type: BlockType) -> tuple[Layout, Block]:
    block = new_block(block_type)
    new_layout = clone_layout(layout)
    new_layout.blocks.append(block)
    logger.debug(f"Added {block.type.value} block {block.id}")
    return new_layout, block


def update_block(layout: Layout, block: Block) -> Layout:
    return _edit(layout, block.id, lambda _: block)


def remove_block(layout: Layout, block_id: str) -> Layout:
    new_layout = clone_layout(layout)
    new_layout.blocks = [b for b in new_layout.blocks if b.id != block_id]
    return new_layout


def move_block(layout: Layout, block_id: str, dx: float, dy: float, zoom: float = 1.0) -> Layout:
    return _edit(layout, block_id, lambda b: moved(b, dx, dy, zoom))


def resize_block(layout: Layout, block_id: str, dw: float, dh: float, zoom: float = 1.0) -> Layout:
    return _edit(layout, block_id, lambda b: resized(b, dw, dh, zoom))


def set_block_size(layout: Layout, block_id: str, width: float, height: float) -> Layout:
    return _edit(layout, block_id, lambda b: sized(b, width, height))


def configure_grid(
    layout: Layout,
    block_id: str,
    rows: int,
    columns: int,
    *,
    start_row_label: Optional[str] = None,
    start_column: Optional[int] = None,
) -> Layout:
    """Regenerate a seated grid from scratch. Existing seat tiers are discarded."""

    def regrid(block: Block) -> Block:
        if block.type != BlockType.seated_grid:
            raise LayoutError(f"block {block.id} is not a seated grid")
        new_rows = build_rows(block.id, rows, columns, start_row_label=start_row_label, start_column=start_column)
        return block.model_copy(deep=True, update={"rows": new_rows})

    return _edit(layout, block_id, regrid)


def set_capacity(layout: Layout, block_id: str, capacity: int) -> Layout:
    if capacity < 0:
        raise LayoutError("capacity must be non-negative")

    def recap(block: Block) -> Block:
        if block.type != BlockType.standing_capacity:
            raise LayoutError(f"block {block.id} is not a standing block")
        new = block.model_copy(deep=True, update={"capacity": int(capacity)})
        if not new.seats:
            new.seats = representative_seats(block.id)
        return new

    return _edit(layout, block_id, recap)


def rename_block(layout: Layout, block_id: str, name: str) -> Layout:
    name = (name or "").strip()
    if not name:
        raise LayoutError("block name is required")
    return _edit(layout, block_id, lambda b: b.model_copy(deep=True, update={"name": name}))


def change_type(layout: Layout, block_id: str, block_type: BlockType) -> Layout:
    """
    Switch a block's type, keeping id, name and position. Type-specific fields
    reset to the new type's defaults; the size survives between resizable types.
    """
    block_type = BlockType(block_type)

    def retype(block: Block) -> Block:
        if block.type == block_type:
            return block
        new = block.model_copy(deep=True, update={"type": block_type})
        _apply_type_defaults(new, keep_size=block.is_resizable and new.is_resizable)
        return new

    return _edit(layout, block_id, retype)


class BlockEditor:
    """
    Editing session over one layout: holds the current layout value, the single
    selected block and the canvas zoom. Each operation replaces ``layout`` with
    a new value; earlier values are never modified.
    """

    def __init__(self, layout: Optional[Layout] = None, *, name: Optional[str] = "Untitled Layout"):
        self.layout = layout if layout is not None else Layout()
        self.name = name
        self.canvas = Canvas()
        self.selected_block_id: Optional[str] = None

    @classmethod
    def from_request(cls, request: SessionSeatingMapRequest) -> "BlockEditor":
        return cls(clone_layout(request.layout), name=request.name)

    def to_request(self) -> SessionSeatingMapRequest:
        return SessionSeatingMapRequest(name=self.name, layout=clone_layout(self.layout))

    @property
    def selected_block(self) -> Optional[Block]:
        if self.selected_block_id is None:
            return None
        return find_block(self.layout, self.selected_block_id)

    def select(self, block_id: Optional[str]) -> Optional[Block]:
        if block_id is not None and find_block(self.layout, block_id) is None:
            block_id = None
        self.selected_block_id = block_id
        return self.selected_block

    def add_block(self, block_type: BlockType) -> Block:
        self.layout, block = add_block(self.layout, block_type)
        return block

    def update_block(self, block: Block) -> None:
        self.layout = update_block(self.layout, block)

    def remove_block(self, block_id: str) -> None:
        self.layout = remove_block(self.layout, block_id)
        if self.selected_block_id == block_id:
            self.selected_block_id = None

    def clear(self) -> None:
        self.layout = Layout()
        self.selected_block_id = None

    def move_block(self, block_id: str, dx: float, dy: float) -> None:
        self.layout = move_block(self.layout, block_id, dx, dy, self.canvas.zoom)

    def resize_block(self, block_id: str, dw: float, dh: float) -> None:
        self.layout = resize_block(self.layout, block_id, dw, dh, self.canvas.zoom)

    def configure_grid(self, block_id: str, rows: int, columns: int, **kwargs) -> None:
        self.layout = configure_grid(self.layout, block_id, rows, columns, **kwargs)

    def set_capacity(self, block_id: str, capacity: int) -> None:
        self.layout = set_capacity(self.layout, block_id, capacity)

    def rename_block(self, block_id: str, name: str) -> None:
        self.layout = rename_block(self.layout, block_id, name)

    def change_type(self, block_id: str, block_type: BlockType) -> None:
        self.layout = change_type(self.layout, block_id, block_type)

    def zoom_in(self) -> float:
        return self.canvas.zoom_in()

    def zoom_out(self) -> float:
        return self.canvas.zoom_out()

    def set_zoom(self, zoom: float) -> float:
        return self.canvas.set_zoom(zoom)
