from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from tagsync.config import get_settings


@event.listens_for(Engine, "connect")
def _set_sqlite_pragmas(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.split(".")[0] != "sqlite3":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute(f"PRAGMA busy_timeout={get_settings().sqlite_busy_timeout_ms:d}")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


engine = create_engine(
    get_settings().db_url,
    echo=False,
    connect_args={"check_same_thread": False},
)


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)
    _run_migrations(engine)


def _run_migrations(eng) -> None:
    """Lightweight forward-only migrations for schema additions."""
    from sqlalchemy import inspect, text

    insp = inspect(eng)
    for table in ("tags", "tags_shared"):
        columns = [c["name"] for c in insp.get_columns(table)]
        # Visibility flags used by the filtered shared-tag view
        for col_name in ("archived", "recycled"):
            if col_name not in columns:
                with eng.begin() as conn:
                    conn.execute(
                        text(f"ALTER TABLE {table} ADD COLUMN {col_name} BOOLEAN NOT NULL DEFAULT 0")
                    )


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
