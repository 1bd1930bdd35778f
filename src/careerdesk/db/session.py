from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from careerdesk.config import get_settings


def build_engine(database_url: str) -> Engine:
    """Engine for the portal store.

    SQLite connections are shared between the request threadpool and the
    websocket loop, and turn on foreign key enforcement so that removing a
    career also removes its live applications.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    sqlite_engine = create_engine(database_url, connect_args={"check_same_thread": False})

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db_session() -> Iterator[Session]:
    # closing rolls back anything the request left uncommitted
    with SessionLocal() as db:
        yield db
