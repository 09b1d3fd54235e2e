from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

from seating_layout.model import LayoutTemplate


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SeatingTemplate(SQLModel, table=True):
    """A reusable structural layout owned by an organization."""

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: str = Field(index=True)
    name: str

    # JSON LayoutData: {"name": ..., "layout": {"blocks": [...]}}; see seating_layout.model.
    layout_json: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def layout_data(self) -> LayoutTemplate:
        return LayoutTemplate.model_validate(json.loads(self.layout_json))
