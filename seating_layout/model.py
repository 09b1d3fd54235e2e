from __future__ import annotations

from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator


class LayoutError(Exception):
    pass


class BlockType(str, Enum):
    seated_grid = "seated_grid"
    standing_capacity = "standing_capacity"
    non_sellable = "non_sellable"


class SeatStatus(str, Enum):
    available = "AVAILABLE"
    reserved = "RESERVED"


class SessionType(str, Enum):
    physical = "PHYSICAL"
    online = "ONLINE"


class WireModel(BaseModel):
    # Field names on the wire are camelCase; Python attributes are snake_case.
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Position(WireModel):
    x: float = 0.0
    y: float = 0.0


class Seat(WireModel):
    id: str
    label: str
    tier_id: Optional[str] = Field(default=None, alias="tierId")
    status: SeatStatus = SeatStatus.available

    @field_validator("status", mode="before")
    @classmethod
    def _missing_status_is_available(cls, v):
        return SeatStatus.available if v is None else v

    @property
    def is_reserved(self) -> bool:
        return self.status == SeatStatus.reserved


class Row(WireModel):
    id: str
    label: str
    seats: list[Seat] = Field(default_factory=list)


class Block(WireModel):
    """
    One placed unit on the canvas.

    Seated grids carry ``rows``; standing blocks carry ``capacity``, a size and
    representative ``seats`` whose tier mirrors the block-wide ``tier_id``;
    non-sellable blocks carry only a size.
    """

    id: str
    name: str
    type: BlockType
    position: Position = Field(default_factory=Position)
    rows: Optional[list[Row]] = None
    seats: Optional[list[Seat]] = None
    capacity: Optional[int] = None
    width: Optional[float] = None
    height: Optional[float] = None
    tier_id: Optional[str] = Field(default=None, alias="tierId")

    @model_validator(mode="after")
    def _normalize_standing_tier(self) -> "Block":
        if self.type == BlockType.standing_capacity:
            if self.tier_id is None:
                self.tier_id = next((s.tier_id for s in self.seats or [] if s.tier_id), None)
            stamp_standing_tier(self)
        return self

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        if self.type == BlockType.standing_capacity:
            stamp_standing_tier(self)
        return handler(self)

    @property
    def is_resizable(self) -> bool:
        return self.type in (BlockType.standing_capacity, BlockType.non_sellable)

    def iter_row_seats(self) -> Iterator[tuple[Row, Seat]]:
        for row in self.rows or []:
            for seat in row.seats:
                yield row, seat

    def seat_count(self) -> int:
        return sum(len(r.seats) for r in self.rows or [])


class Layout(WireModel):
    blocks: list[Block] = Field(default_factory=list)


class SessionSeatingMapRequest(WireModel):
    name: Optional[str] = None
    layout: Layout = Field(default_factory=Layout)

    def to_wire(self) -> dict:
        # ``name`` is nullable on the wire, so it is always emitted.
        data = super().to_wire()
        data.setdefault("name", None)
        return data


class Tier(WireModel):
    id: str
    name: str = Field(min_length=1)
    price: float = Field(ge=0, default=0.0)
    color: Optional[str] = None


class SeatedSession(WireModel):
    """The slice of a session the read-only renderer looks at."""

    session_type: SessionType = Field(default=SessionType.physical, alias="sessionType")
    layout_data: Optional[SessionSeatingMapRequest] = Field(default=None, alias="layoutData")


# Structural templates: grids are described by counts, not concrete seats.


class TemplateBlock(WireModel):
    id: str
    name: str
    type: BlockType
    position: Position = Field(default_factory=Position)
    rows: Optional[int] = Field(default=None, ge=0)
    columns: Optional[int] = Field(default=None, ge=0)
    start_row_label: Optional[str] = Field(default=None, alias="startRowLabel")
    start_column_label: Optional[int] = Field(default=None, alias="startColumnLabel")
    width: Optional[float] = None
    height: Optional[float] = None
    capacity: Optional[int] = Field(default=None, ge=0)


class TemplateLayout(WireModel):
    blocks: list[TemplateBlock] = Field(default_factory=list)


class LayoutTemplate(WireModel):
    name: str
    layout: TemplateLayout = Field(default_factory=TemplateLayout)


def stamp_standing_tier(block: Block) -> None:
    # Representative seats always mirror the block tier and are never reserved.
    for seat in block.seats or []:
        seat.tier_id = block.tier_id
        seat.status = SeatStatus.available


def clone_layout(layout: Layout) -> Layout:
    return layout.model_copy(deep=True)


def find_block(layout: Layout, block_id: str) -> Optional[Block]:
    for block in layout.blocks:
        if block.id == block_id:
            return block
    return None


def find_row(block: Block, row_id: str) -> Optional[Row]:
    for row in block.rows or []:
        if row.id == row_id:
            return row
    return None


def find_seat(layout: Layout, block_id: str, row_id: Optional[str], seat_id: str) -> Optional[Seat]:
    block = find_block(layout, block_id)
    if block is None:
        return None
    if row_id is not None:
        row = find_row(block, row_id)
        if row is None:
            return None
        return next((s for s in row.seats if s.id == seat_id), None)
    for seat in block.seats or []:
        if seat.id == seat_id:
            return seat
    return next((s for _, s in block.iter_row_seats() if s.id == seat_id), None)


def _block_seats(block: Block) -> Iterator[tuple[Optional[Row], Seat]]:
    for seat in block.seats or []:
        yield None, seat
    yield from block.iter_row_seats()


def iter_seats(layout: Layout) -> Iterator[tuple[Block, Optional[Row], Seat]]:
    for block in layout.blocks:
        for row, seat in _block_seats(block):
            yield block, row, seat


def validate_layout(layout: Layout) -> list[str]:
    problems: list[str] = []
    block_ids: set[str] = set()
    for block in layout.blocks:
        if block.id in block_ids:
            problems.append(f"duplicate block id: {block.id}")
        block_ids.add(block.id)

        seat_ids: set[str] = set()
        for row, seat in _block_seats(block):
            if seat.id in seat_ids:
                problems.append(f"duplicate seat id in block {block.id}: {seat.id}")
            seat_ids.add(seat.id)
            if seat.is_reserved and seat.tier_id is not None:
                where = f"row {row.label}" if row is not None else "representative seats"
                problems.append(f"seat {seat.id} in block {block.id} ({where}) is reserved but has tier {seat.tier_id}")

        if block.type == BlockType.seated_grid and block.seats:
            problems.append(f"seated block {block.id} carries representative seats")
        if block.type != BlockType.seated_grid and block.rows:
            problems.append(f"{block.type.value} block {block.id} carries rows")
        if block.capacity is not None and block.capacity < 0:
            problems.append(f"block {block.id} has negative capacity")
    return problems
