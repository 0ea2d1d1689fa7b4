import os

# Set required env vars for tests before importing modules that load them
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret-key"
os.environ["JWT_EXPIRES_IN"] = "8h"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["RATE_LIMIT_ENABLED"] = "true"

from passlib.hash import bcrypt

ADMIN_PASSWORD = "correct-horse-battery-staple"
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.using(rounds=4).hash(ADMIN_PASSWORD)

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, create_tables, engine
from main import app
from security.auth import create_access_token
from security.ratelimit import limiter


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop them after."""
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin')}"}
