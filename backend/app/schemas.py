from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from seating_layout.model import LayoutTemplate, SessionSeatingMapRequest, Tier, WireModel


class TemplateRequest(WireModel):
    name: str = Field(min_length=1)
    organization_id: str = Field(alias="organizationId", min_length=1)
    layout_data: LayoutTemplate = Field(alias="layoutData")


class TemplateResponse(WireModel):
    id: int
    organization_id: str = Field(alias="organizationId")
    name: str
    layout_data: LayoutTemplate = Field(alias="layoutData")
    updated_at: datetime = Field(alias="updatedAt")


class TemplatePage(WireModel):
    content: list[TemplateResponse]
    total_pages: int = Field(alias="totalPages")
    total_elements: int = Field(alias="totalElements")
    last: bool
    size: int
    number: int
    first: bool
    number_of_elements: int = Field(alias="numberOfElements")
    empty: bool


class SeatingMapBody(WireModel):
    seating_map: SessionSeatingMapRequest = Field(alias="seatingMap")
    tiers: list[Tier] = Field(default_factory=list)


class ToolBody(SeatingMapBody):
    # A tier id, "RESERVED", or null to clear.
    selected_tier_id: Optional[str] = Field(default=None, alias="selectedTierId")


class SeatClickRequest(ToolBody):
    block_id: str = Field(alias="blockId")
    row_id: Optional[str] = Field(default=None, alias="rowId")
    seat_id: str = Field(alias="seatId")


class BlockClickRequest(ToolBody):
    block_id: str = Field(alias="blockId")


class NormalizeRequest(SeatingMapBody):
    padding: float = Field(ge=0, default=48.0)
