from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel, Session, create_engine

from . import config


class RunStatus(str, Enum):
    READY = "READY"
    FAILED = "FAILED"


class ReportRun(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    kind: str = Field(index=True)
    customer_name: str = ""
    file_name: str
    path: Optional[str] = None
    status: RunStatus = Field(default=RunStatus.READY)
    fail_code: Optional[str] = None
    fail_detail: Optional[str] = None
    used_fallback: bool = False
    row_count: int = 0
    page_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
