from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .canvas import block_footprint
from .model import BlockType, Layout, SeatedSession, SeatStatus, SessionType, Tier


UNASSIGNED_COLOR = "#d1d5db"
UNKNOWN_TIER_COLOR = "#6b7280"
RESERVED_OPACITY = 0.3


def tier_name(tier_id: Optional[str], tiers: Iterable[Tier]) -> str:
    if tier_id is None:
        return "Unassigned"
    tier = next((t for t in tiers if t.id == tier_id), None)
    return tier.name if tier else "Unknown Tier"


def tier_color(tier_id: Optional[str], tiers: Iterable[Tier]) -> str:
    if tier_id is None:
        return UNASSIGNED_COLOR
    tier = next((t for t in tiers if t.id == tier_id), None)
    return (tier.color if tier else None) or UNKNOWN_TIER_COLOR


def status_label(status: Optional[SeatStatus]) -> str:
    if status == SeatStatus.reserved:
        return "Reserved"
    return "Available"


@dataclass(frozen=True)
class SeatView:
    seat_id: str
    tier_id: Optional[str]
    block: str
    row: str
    seat: str
    status: str
    tier: str
    color: str
    opacity: float
    disabled: bool


@dataclass(frozen=True)
class BlockView:
    block_id: str
    kind: BlockType
    name: str
    x: float
    y: float
    width: float
    height: float
    color: Optional[str] = None
    label: Optional[str] = None
    columns: int = 0
    grid: list[list[SeatView]] = field(default_factory=list)
    row_labels: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LayoutView:
    name: Optional[str]
    blocks: list[BlockView]


def render_layout(layout: Layout, tiers: Iterable[Tier], *, name: Optional[str] = None) -> LayoutView:
    tiers = list(tiers)
    views: list[BlockView] = []
    for block in layout.blocks:
        width, height = block_footprint(block)
        common = dict(
            block_id=block.id,
            kind=block.type,
            name=block.name,
            x=block.position.x,
            y=block.position.y,
            width=width,
            height=height,
        )
        if block.type == BlockType.seated_grid:
            rows = block.rows or []
            grid = [
                [
                    SeatView(
                        seat_id=seat.id,
                        tier_id=seat.tier_id,
                        block=block.name,
                        row=row.label,
                        seat=seat.label,
                        status=status_label(seat.status),
                        tier=tier_name(seat.tier_id, tiers),
                        color=tier_color(seat.tier_id, tiers),
                        opacity=RESERVED_OPACITY if seat.is_reserved else 1.0,
                        disabled=seat.is_reserved,
                    )
                    for seat in row.seats
                ]
                for row in rows
            ]
            views.append(
                BlockView(
                    **common,
                    columns=max((len(r.seats) for r in rows), default=0),
                    grid=grid,
                    row_labels=[r.label for r in rows],
                )
            )
        elif block.type == BlockType.standing_capacity:
            views.append(
                BlockView(
                    **common,
                    color=tier_color(block.tier_id, tiers),
                    label=f"Capacity: {block.capacity or 0}",
                )
            )
        else:
            views.append(BlockView(**common, label=block.name))
    return LayoutView(name=name, blocks=views)


def render_session(session: SeatedSession, tiers: Iterable[Tier]) -> Optional[LayoutView]:
    # Online sessions and sessions without a map have nothing to draw.
    if session.layout_data is None or session.session_type != SessionType.physical:
        return None
    return render_layout(session.layout_data.layout, tiers, name=session.layout_data.name)


def _cell(seat: SeatView, width: int) -> str:
    if seat.disabled:
        mark = "x"
    elif seat.tier_id is None:
        mark = "."
    elif seat.tier == "Unknown Tier":
        mark = "?"
    else:
        mark = seat.tier[0]
    return mark.center(width)


def render_text(view: LayoutView, *, cell_width: int = 3) -> str:
    cell_width = max(1, int(cell_width))
    lines: list[str] = []
    if view.name:
        lines.append(view.name)
    for b in view.blocks:
        lines.append(f"[{b.block_id}] {b.name} ({b.kind.value}) @ ({b.x:g}, {b.y:g}) {b.width:g}x{b.height:g}")
        if b.kind == BlockType.seated_grid:
            label_w = max((len(lbl) for lbl in b.row_labels), default=1) + 1
            for label, seats in zip(b.row_labels, b.grid):
                lines.append("  " + label.ljust(label_w) + "".join(_cell(s, cell_width) for s in seats))
        elif b.label:
            lines.append(f"  {b.label}")
    return "\n".join(lines)
