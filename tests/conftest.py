"""
- Point the app at an in-memory SQLite DB before it is imported
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Give every test its own GameStore so live games don't leak between tests.
- Provide a client fixture (TestClient(app)) that already has the overrides applied.
"""
import os
import pytest
from typing import Generator

# Must happen before abgame.db is imported: it reads these at import time.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
# Ensure the app does NOT run dev-only startup hooks (e.g., auto-create tables against real DB)
os.environ.setdefault("APP_ENV", "test")
# Never reach out to random.org from tests
os.environ["RANDOM_ORG_ENABLED"] = "false"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from abgame.db import Base, get_db
from abgame.main import app, get_games
from abgame.store import GameStore
from abgame import models  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()

@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits, so delete rows before each test for a clean slate."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM match_records"))
    yield

@pytest.fixture
def game_store() -> GameStore:
    return GameStore()

@pytest.fixture(autouse=True)
def override_dep(db_session, game_store):
    """Force the app to use our test session and a fresh game store for every request."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    app.dependency_overrides[get_games] = lambda: game_store
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)
