from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .model import Block, BlockType, Layout, SeatStatus, Tier
from .render import tier_color, tier_name


def sellable_capacity(block: Block) -> int:
    if block.type == BlockType.seated_grid:
        return sum(1 for _, s in block.iter_row_seats() if not s.is_reserved)
    if block.type == BlockType.standing_capacity:
        return int(block.capacity or 0)
    return 0


def total_capacity(layout: Layout) -> int:
    return sum(sellable_capacity(b) for b in layout.blocks)


def tier_counts(layout: Layout) -> dict[Optional[str], int]:
    """Sellable places per tier id; places without a tier count under ``None``."""
    counts: dict[Optional[str], int] = {}
    for block in layout.blocks:
        if block.type == BlockType.seated_grid:
            for _, seat in block.iter_row_seats():
                if seat.is_reserved:
                    continue
                key = seat.tier_id
                counts[key] = counts.get(key, 0) + 1
        elif block.type == BlockType.standing_capacity and block.capacity:
            key = block.tier_id
            counts[key] = counts.get(key, 0) + int(block.capacity)
    return counts


def status_counts(layout: Layout) -> dict[str, int]:
    counts = {SeatStatus.available.value: 0, SeatStatus.reserved.value: 0}
    for block in layout.blocks:
        if block.type == BlockType.seated_grid:
            for _, seat in block.iter_row_seats():
                counts[seat.status.value] += 1
        elif block.type == BlockType.standing_capacity and block.capacity:
            counts[SeatStatus.available.value] += int(block.capacity)
    return counts


@dataclass(frozen=True)
class TierTally:
    tier_id: Optional[str]
    name: str
    color: str
    count: int


def capacity_summary(layout: Layout, tiers: Iterable[Tier]) -> list[TierTally]:
    tiers = list(tiers)
    return [
        TierTally(tier_id=tid, name=tier_name(tid, tiers), color=tier_color(tid, tiers), count=n)
        for tid, n in tier_counts(layout).items()
    ]
