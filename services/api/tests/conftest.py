import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cookbook.main import app
from cookbook.db import Base, build_engine, get_db
from cookbook.infra import redis_client

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# StaticPool: every session shares the single in-memory connection
engine = build_engine(SQLALCHEMY_DATABASE_URL, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup and assertions.

    The in-memory connection is shared with the app, so end any open
    transaction (commit/rollback) before the next client call.
    """
    session = TestingSessionLocal()
    yield session
    session.close()


import fakeredis
import fakeredis.aioredis


@pytest.fixture(autouse=True)
def mock_redis():
    server = fakeredis.FakeServer()
    redis_client._redis_async = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)

    yield

    redis_client._redis_async = None


# --- Payload helpers ---

def make_payload(
    title="Garden Salad",
    serving_size=2,
    ingredients=None,
    instructions=None,
    description=None,
):
    payload = {
        "title": title,
        "servingSize": serving_size,
        "ingredients": ingredients if ingredients is not None else [
            {"name": "Tomato", "quantity": 2, "unit": "pcs", "isVegetarian": True},
            {"name": "Lettuce", "quantity": 1, "unit": "head", "isVegetarian": True},
        ],
        "instructions": instructions if instructions is not None else [
            {"content": "Chop."},
            {"content": "Toss."},
        ],
    }
    if description is not None:
        payload["description"] = description
    return payload


@pytest.fixture
def payload_factory():
    return make_payload
