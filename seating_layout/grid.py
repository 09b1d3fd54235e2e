from __future__ import annotations

import uuid
from typing import Optional

from loguru import logger

from .model import (
    Block,
    BlockType,
    Layout,
    LayoutError,
    LayoutTemplate,
    Row,
    Seat,
    SeatStatus,
    SessionSeatingMapRequest,
    TemplateBlock,
)


def new_block_id() -> str:
    return f"temp_{uuid.uuid4().hex[:12]}"


def row_label(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA, 27 -> AB (spreadsheet column style)."""
    if index < 0:
        raise LayoutError(f"row index must be non-negative: {index}")
    label = ""
    n = index
    while n >= 0:
        label = chr(ord("A") + n % 26) + label
        n = n // 26 - 1
    return label


def row_index(label: str) -> int:
    label = (label or "").strip().upper()
    if not label or not all("A" <= ch <= "Z" for ch in label):
        raise LayoutError(f"row label must be letters A-Z: {label!r}")
    index = 0
    for ch in label:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


def build_rows(
    block_id: str,
    rows: int,
    columns: int,
    *,
    start_row_label: Optional[str] = None,
    start_column: Optional[int] = None,
) -> list[Row]:
    if rows <= 0 or columns <= 0:
        raise LayoutError("rows and columns must be positive integers")
    first_row = row_index(start_row_label) if start_row_label else 0
    first_col = 1 if start_column is None else int(start_column)

    out: list[Row] = []
    for r in range(rows):
        label = row_label(first_row + r)
        seats = [
            Seat(
                id=f"temp_seat_{block_id}_{r}_{c}",
                label=f"{first_col + c}{label}",
                status=SeatStatus.available,
            )
            for c in range(columns)
        ]
        out.append(Row(id=f"temp_row_{block_id}_{r}", label=label, seats=seats))
    return out


def representative_seats(block_id: str, count: int = 1) -> list[Seat]:
    return [Seat(id=f"temp_seat_{block_id}_{i}", label=f"Slot {i + 1}") for i in range(count)]


def materialize_block(tb: TemplateBlock) -> Block:
    """Turn one structural template block into a concrete session-map block."""
    block = Block(id=tb.id, name=tb.name, type=tb.type, position=tb.position.model_copy())
    if tb.type == BlockType.seated_grid:
        if tb.rows and tb.columns:
            block.rows = build_rows(
                tb.id,
                tb.rows,
                tb.columns,
                start_row_label=tb.start_row_label,
                start_column=tb.start_column_label,
            )
        else:
            block.rows = []
    elif tb.type == BlockType.standing_capacity:
        block.capacity = tb.capacity or 0
        block.width = tb.width
        block.height = tb.height
        block.seats = representative_seats(tb.id) if block.capacity else []
    else:
        block.width = tb.width
        block.height = tb.height
    return block


def materialize_template(template: LayoutTemplate) -> SessionSeatingMapRequest:
    blocks = [materialize_block(tb) for tb in template.layout.blocks]
    seats = sum(b.seat_count() for b in blocks)
    logger.debug(f"Materialized template {template.name!r}: {len(blocks)} blocks, {seats} seats")
    return SessionSeatingMapRequest(name=template.name, layout=Layout(blocks=blocks))
