import os
import sys
from datetime import date, timedelta

# Point the app at a throwaway in-memory database before anything imports config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from database import Base, SessionLocal, engine
import models  # noqa: F401

TODAY = date(2026, 10, 18)


def daily_logs(days_ago):
    """Completed habit logs on the given offsets from TODAY."""
    return [{"date": TODAY - timedelta(days=n), "completed": True} for n in days_ago]


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
