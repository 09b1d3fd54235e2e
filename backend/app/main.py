from __future__ import annotations

import json
import math

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlmodel import Session, func, select

from seating_layout.canvas import GeometryError, normalize_layout
from seating_layout.grid import materialize_template
from seating_layout.logger_config import configure_logging
from seating_layout.model import LayoutError, SessionSeatingMapRequest, validate_layout
from seating_layout.render import render_layout
from seating_layout.summary import capacity_summary, status_counts, total_capacity
from seating_layout.tiers import AssignmentResult, apply_to_all, block_click, seat_click, tool_from_selection

from .db import get_session, init_db
from .models import SeatingTemplate, utc_now
from .schemas import (
    BlockClickRequest,
    NormalizeRequest,
    SeatClickRequest,
    SeatingMapBody,
    TemplatePage,
    TemplateRequest,
    TemplateResponse,
)


app = FastAPI(title="Seating Layout API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()


def _template_response(t: SeatingTemplate) -> TemplateResponse:
    return TemplateResponse(
        id=t.id,
        organization_id=t.organization_id,
        name=t.name,
        layout_data=t.layout_data(),
        updated_at=t.updated_at,
    )


def _template_out(t: SeatingTemplate) -> dict:
    return _template_response(t).to_wire()


def _get_template(session: Session, template_id: int) -> SeatingTemplate:
    t = session.get(SeatingTemplate, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="seating template not found")
    return t


def _seating_map_out(seating_map: SessionSeatingMapRequest) -> dict:
    return seating_map.to_wire()


def _assignment_out(name, result: AssignmentResult) -> dict:
    return {
        "seatingMap": _seating_map_out(SessionSeatingMapRequest(name=name, layout=result.layout)),
        "affected": result.affected,
        "applied": result.applied,
        "tierName": result.tier_name,
        "rejected": result.rejected,
        "warning": result.warning,
    }


@app.get("/health")
def health() -> dict:
    return {"ok": True}


# --- Layout templates ---


@app.post("/seating-templates")
def create_template(payload: TemplateRequest, session: Session = Depends(get_session)) -> dict:
    t = SeatingTemplate(
        organization_id=payload.organization_id,
        name=payload.name,
        layout_json=json.dumps(payload.layout_data.to_wire()),
    )
    session.add(t)
    session.commit()
    session.refresh(t)
    logger.info(f"Created seating template {t.id} for organization {t.organization_id}")
    return _template_out(t)


@app.get("/seating-templates/organization/{organization_id}")
def list_templates(
    organization_id: str,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
    session: Session = Depends(get_session),
) -> dict:
    total = session.exec(
        select(func.count()).select_from(SeatingTemplate).where(SeatingTemplate.organization_id == organization_id)
    ).one()
    items = session.exec(
        select(SeatingTemplate)
        .where(SeatingTemplate.organization_id == organization_id)
        .order_by(SeatingTemplate.updated_at.desc(), SeatingTemplate.id.desc())
        .offset(page * size)
        .limit(size)
    ).all()
    total_pages = math.ceil(total / size) if total else 0
    return TemplatePage(
        content=[_template_response(t) for t in items],
        total_pages=total_pages,
        total_elements=total,
        last=page >= total_pages - 1,
        size=size,
        number=page,
        first=page == 0,
        number_of_elements=len(items),
        empty=not items,
    ).to_wire()


@app.get("/seating-templates/{template_id}")
def get_template(template_id: int, session: Session = Depends(get_session)) -> dict:
    return _template_out(_get_template(session, template_id))


@app.put("/seating-templates/{template_id}")
def update_template(template_id: int, payload: TemplateRequest, session: Session = Depends(get_session)) -> dict:
    t = _get_template(session, template_id)
    t.name = payload.name
    t.organization_id = payload.organization_id
    t.layout_json = json.dumps(payload.layout_data.to_wire())
    t.updated_at = utc_now()
    session.add(t)
    session.commit()
    session.refresh(t)
    return _template_out(t)


@app.delete("/seating-templates/{template_id}")
def delete_template(template_id: int, session: Session = Depends(get_session)) -> dict:
    t = _get_template(session, template_id)
    session.delete(t)
    session.commit()
    logger.info(f"Deleted seating template {template_id}")
    return {"deleted": True}


@app.post("/seating-templates/{template_id}/materialize")
def materialize(template_id: int, session: Session = Depends(get_session)) -> dict:
    t = _get_template(session, template_id)
    try:
        seating_map = materialize_template(t.layout_data())
    except LayoutError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _seating_map_out(seating_map)


# --- Stateless layout editing ---


@app.post("/layouts/seat-click")
def layout_seat_click(payload: SeatClickRequest) -> dict:
    tool = tool_from_selection(payload.selected_tier_id)
    result = seat_click(payload.seating_map.layout, tool, payload.block_id, payload.row_id, payload.seat_id)
    return _assignment_out(payload.seating_map.name, result)


@app.post("/layouts/block-click")
def layout_block_click(payload: BlockClickRequest) -> dict:
    tool = tool_from_selection(payload.selected_tier_id)
    result = block_click(payload.seating_map.layout, tool, payload.block_id)
    return _assignment_out(payload.seating_map.name, result)


@app.post("/layouts/apply-to-all")
def layout_apply_to_all(payload: BlockClickRequest) -> dict:
    tool = tool_from_selection(payload.selected_tier_id)
    result = apply_to_all(payload.seating_map.layout, tool, payload.block_id, payload.tiers)
    return _assignment_out(payload.seating_map.name, result)


@app.post("/layouts/render")
def layout_render(payload: SeatingMapBody) -> dict:
    view = render_layout(payload.seating_map.layout, payload.tiers, name=payload.seating_map.name)
    return {
        "name": view.name,
        "blocks": [
            {
                "id": b.block_id,
                "type": b.kind.value,
                "name": b.name,
                "x": b.x,
                "y": b.y,
                "width": b.width,
                "height": b.height,
                "color": b.color,
                "label": b.label,
                "columns": b.columns,
                "rows": [
                    {
                        "label": label,
                        "seats": [
                            {
                                "id": s.seat_id,
                                "tierId": s.tier_id,
                                "label": s.seat,
                                "status": s.status,
                                "tier": s.tier,
                                "color": s.color,
                                "opacity": s.opacity,
                                "disabled": s.disabled,
                            }
                            for s in seats
                        ],
                    }
                    for label, seats in zip(b.row_labels, b.grid)
                ],
            }
            for b in view.blocks
        ],
    }


@app.post("/layouts/summary")
def layout_summary(payload: SeatingMapBody) -> dict:
    layout = payload.seating_map.layout
    return {
        "totalCapacity": total_capacity(layout),
        "byTier": [
            {"tierId": t.tier_id, "name": t.name, "color": t.color, "count": t.count}
            for t in capacity_summary(layout, payload.tiers)
        ],
        "byStatus": status_counts(layout),
    }


@app.post("/layouts/normalize")
def layout_normalize(payload: NormalizeRequest) -> dict:
    try:
        norm = normalize_layout(payload.seating_map.layout, padding=payload.padding)
    except GeometryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {
        "seatingMap": _seating_map_out(SessionSeatingMapRequest(name=payload.seating_map.name, layout=norm.layout)),
        "contentWidth": norm.content_width,
        "contentHeight": norm.content_height,
        "canvasWidth": norm.canvas_width,
        "canvasHeight": norm.canvas_height,
        "padding": norm.padding,
    }


@app.post("/layouts/validate")
def layout_validate(payload: SeatingMapBody) -> dict:
    problems = validate_layout(payload.seating_map.layout)
    return {"valid": not problems, "problems": problems}
