"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
DATABASE_URL is set before the application is imported so the app's own
engine never tries to reach Postgres.
"""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_habitpulse.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from habitpulse.db.base import Base, get_db
from habitpulse.main import app

SQLITE_URL = "sqlite:///./test_habitpulse.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user_id() -> str:
    """A fresh user per test keeps every query isolated."""
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def headers(user_id) -> dict[str, str]:
    return {"X-User-Id": user_id}
