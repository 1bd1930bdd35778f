from __future__ import annotations

from sqlalchemy import text

from careerdesk.db.session import build_engine


def test_sqlite_connections_enforce_foreign_keys(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'portal.db'}")
    try:
        with engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
    finally:
        engine.dispose()
