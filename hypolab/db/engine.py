"""SQLite engine and session factory."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"


def create_db_engine(
    db_path: str | Path,
    echo: bool = False,
    busy_timeout_ms: int = 30_000,
) -> Engine:
    """Engine with foreign keys enforced and, for file databases, WAL journaling.

    ``:memory:`` gets a single shared connection so every session sees the
    same schema. Writers that hit the lock wait up to *busy_timeout_ms*
    before SQLite reports "database is locked".
    """
    in_memory = str(db_path) == MEMORY
    if in_memory:
        engine = create_engine(
            "sqlite://",
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            f"sqlite:///{Path(db_path)}",
            echo=echo,
            connect_args={"timeout": busy_timeout_ms / 1000},
        )

    pragmas = [f"busy_timeout={busy_timeout_ms}", "foreign_keys=ON"]
    if not in_memory:
        pragmas.insert(0, "journal_mode=WAL")

    @event.listens_for(engine, "connect")
    def _apply_pragmas(dbapi_conn: object, _connection_record: object) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[attr-defined]
        for pragma in pragmas:
            cursor.execute(f"PRAGMA {pragma}")
        cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)
