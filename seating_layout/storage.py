from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from .model import Layout, LayoutError, LayoutTemplate, SessionSeatingMapRequest, Tier


def _read_json(path: str | Path, what: str):
    p = Path(path)
    if not p.exists():
        raise LayoutError(f"{what} file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise LayoutError(f"failed to read {what} JSON: {e}") from e


def _write_json(data, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def load_map(path: str | Path) -> SessionSeatingMapRequest:
    data = _read_json(path, "seating map")
    try:
        return SessionSeatingMapRequest.model_validate(data)
    except ValidationError as e:
        raise LayoutError(f"invalid seating map data: {e}") from e


def save_map(seating_map: SessionSeatingMapRequest, path: str | Path) -> None:
    _write_json(seating_map.to_wire(), path)


def load_tiers(path: Optional[str | Path]) -> list[Tier]:
    if path is None:
        return []
    data = _read_json(path, "tiers")
    try:
        return TypeAdapter(list[Tier]).validate_python(data)
    except ValidationError as e:
        raise LayoutError(f"invalid tiers data: {e}") from e


def load_template(path: str | Path) -> LayoutTemplate:
    data = _read_json(path, "layout template")
    try:
        return LayoutTemplate.model_validate(data)
    except ValidationError as e:
        raise LayoutError(f"invalid layout template data: {e}") from e


def maybe_init_map(path: str | Path, *, name: Optional[str] = None, overwrite: bool = False) -> SessionSeatingMapRequest:
    p = Path(path)
    if p.exists() and not overwrite:
        return load_map(p)

    seating_map = SessionSeatingMapRequest(name=name, layout=Layout())
    save_map(seating_map, p)
    return seating_map
