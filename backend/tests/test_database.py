from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from database import SessionLocal, _engine_args


def test_in_memory_sqlite_shares_one_connection():
    args = _engine_args("sqlite://")
    assert args["poolclass"] is StaticPool
    assert args["connect_args"] == {"check_same_thread": False}
    assert _engine_args("sqlite:///:memory:")["poolclass"] is StaticPool


def test_file_sqlite_keeps_default_pool():
    assert _engine_args("sqlite:///./data/growth.db") == {"connect_args": {"check_same_thread": False}}


def test_postgres_gets_pool_settings():
    args = _engine_args("postgresql://user:pw@db:5432/growth")
    assert "connect_args" not in args
    assert args["pool_size"] == 5
    assert args["pool_recycle"] == 1800


def test_session_talks_to_engine(db):
    assert db.execute(text("SELECT 1")).scalar() == 1
    session = SessionLocal()
    try:
        assert session.execute(text("SELECT count(*) FROM goals")).scalar() == 0
    finally:
        session.close()
