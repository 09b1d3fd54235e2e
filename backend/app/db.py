from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine


def _default_db_url() -> str:
    # Keep data out of git by default.
    data_dir = Path(os.environ.get("SEATING_LAYOUT_DATA_DIR", Path.cwd() / "data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{data_dir / 'seating_layouts.db'}"


DB_URL = os.environ.get("SEATING_LAYOUT_DB_URL") or _default_db_url()

engine = create_engine(
    DB_URL,
    echo=False,
    connect_args={"check_same_thread": False} if DB_URL.startswith("sqlite") else {},
)


def init_db() -> None:
    from . import models  # noqa: F401 - registers the template table

    SQLModel.metadata.create_all(engine)


def get_session() -> Iterator[Session]:
    """Request-scoped session; closed once the response has been sent."""
    with Session(engine) as session:
        yield session
