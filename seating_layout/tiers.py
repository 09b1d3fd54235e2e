from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from loguru import logger

from .model import (
    BlockType,
    Layout,
    SeatStatus,
    Tier,
    clone_layout,
    find_block,
    find_row,
    stamp_standing_tier,
)


RESERVED = "RESERVED"

STANDING_RESERVE_WARNING = (
    "You cannot reserve an entire standing block. "
    "To make it unavailable, change its type to non-sellable."
)


@dataclass(frozen=True)
class TierTool:
    tier_id: str


@dataclass(frozen=True)
class ReserveTool:
    pass


# None means "no tier": clicking clears assignments.
Tool = Union[TierTool, ReserveTool, None]


def tool_from_selection(value: Optional[str]) -> Tool:
    """Adapt the palette selection (a tier id, "RESERVED" or null) to a Tool."""
    if value is None or value == "":
        return None
    if value == RESERVED:
        return ReserveTool()
    return TierTool(value)


def tool_to_selection(tool: Tool) -> Optional[str]:
    if isinstance(tool, ReserveTool):
        return RESERVED
    if isinstance(tool, TierTool):
        return tool.tier_id
    return None


def _tool_tier_id(tool: Tool) -> Optional[str]:
    return tool.tier_id if isinstance(tool, TierTool) else None


@dataclass(frozen=True)
class AssignmentResult:
    layout: Layout
    affected: int = 0
    tier_name: Optional[str] = None
    warning: Optional[str] = None
    # True when the target was found and the tool took effect, even on zero places.
    applied: bool = False

    @property
    def rejected(self) -> bool:
        return self.warning is not None


def seat_click(layout: Layout, tool: Tool, block_id: str, row_id: Optional[str], seat_id: str) -> AssignmentResult:
    """
    Toggle one seat of a seated grid.

    Reserve mode flips AVAILABLE/RESERVED and always drops the tier. A tier tool
    assigns its tier, or clears it when the seat already carries that tier, and
    always leaves the seat AVAILABLE.
    """
    new_layout = clone_layout(layout)
    block = find_block(new_layout, block_id)
    if block is None:
        return AssignmentResult(layout=new_layout)
    if block.type == BlockType.standing_capacity and isinstance(tool, ReserveTool):
        logger.warning(f"Rejected reserve on standing block {block_id}")
        return AssignmentResult(layout=layout, warning=STANDING_RESERVE_WARNING)
    if block.type != BlockType.seated_grid:
        return AssignmentResult(layout=new_layout)

    rows = [find_row(block, row_id)] if row_id is not None else list(block.rows or [])
    seat = next((s for r in rows if r is not None for s in r.seats if s.id == seat_id), None)
    if seat is None:
        return AssignmentResult(layout=new_layout)

    if isinstance(tool, ReserveTool):
        seat.status = SeatStatus.available if seat.is_reserved else SeatStatus.reserved
        seat.tier_id = None
    else:
        tier_id = _tool_tier_id(tool)
        seat.tier_id = None if seat.tier_id == tier_id else tier_id
        seat.status = SeatStatus.available

    logger.debug(f"Seat {seat_id} in block {block_id}: status={seat.status.value} tier={seat.tier_id}")
    return AssignmentResult(layout=new_layout, affected=1, applied=True)


def block_click(layout: Layout, tool: Tool, block_id: str) -> AssignmentResult:
    """Assign (or clear) the block-wide tier of a standing block."""
    block = find_block(layout, block_id)
    if block is None or block.type != BlockType.standing_capacity:
        return AssignmentResult(layout=clone_layout(layout))
    if isinstance(tool, ReserveTool):
        logger.warning(f"Rejected reserve on standing block {block_id}")
        return AssignmentResult(layout=layout, warning=STANDING_RESERVE_WARNING)

    new_layout = clone_layout(layout)
    block = find_block(new_layout, block_id)
    block.tier_id = _tool_tier_id(tool)
    stamp_standing_tier(block)
    logger.debug(f"Standing block {block_id} tier={block.tier_id}")
    return AssignmentResult(layout=new_layout, affected=int(block.capacity or 0), applied=True)


def _tier_display_name(tool: Tool, tiers: Iterable[Tier]) -> str:
    if isinstance(tool, ReserveTool):
        return "Reserved"
    if tool is None:
        return "Unassigned"
    match = next((t for t in tiers if t.id == tool.tier_id), None)
    return match.name if match else "selected tier"


def apply_to_all(layout: Layout, tool: Tool, block_id: str, tiers: Iterable[Tier] = ()) -> AssignmentResult:
    """
    Bulk variant of seat_click over every seat of a seated grid. This is not a
    toggle: every seat ends up reserved, or AVAILABLE with the tool's tier.
    """
    new_layout = clone_layout(layout)
    block = find_block(new_layout, block_id)
    if block is None or block.type != BlockType.seated_grid:
        return AssignmentResult(layout=new_layout)

    reserve = isinstance(tool, ReserveTool)
    tier_id = _tool_tier_id(tool)
    affected = 0
    for _, seat in block.iter_row_seats():
        seat.status = SeatStatus.reserved if reserve else SeatStatus.available
        seat.tier_id = None if reserve else tier_id
        affected += 1

    name = _tier_display_name(tool, tiers)
    logger.debug(f"Applied {name} to {affected} seats in block {block_id}")
    return AssignmentResult(layout=new_layout, affected=affected, tier_name=name, applied=True)


@dataclass
class TierAssignmentEngine:
    """
    Holds the current layout, the tier list and the armed tool. Every operation
    swaps in a new layout value; rejected operations keep the current one.
    """

    layout: Layout
    tiers: list[Tier] = field(default_factory=list)
    tool: Tool = None

    def select(self, tool: Tool) -> None:
        self.tool = tool

    def select_tier(self, selection: Optional[str]) -> None:
        self.tool = tool_from_selection(selection)

    def _apply(self, result: AssignmentResult) -> AssignmentResult:
        if not result.rejected:
            self.layout = result.layout
        return result

    def seat_click(self, block_id: str, row_id: Optional[str], seat_id: str) -> AssignmentResult:
        return self._apply(seat_click(self.layout, self.tool, block_id, row_id, seat_id))

    def block_click(self, block_id: str) -> AssignmentResult:
        return self._apply(block_click(self.layout, self.tool, block_id))

    def apply_to_all(self, block_id: str) -> AssignmentResult:
        return self._apply(apply_to_all(self.layout, self.tool, block_id, self.tiers))
