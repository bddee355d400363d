import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Settings are read at import time, so configure them before importing the app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-hoardings")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

# Add the project root to the sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.main import app
from app.database import Base, get_db
from app import models
from app.core.security import create_access_token_for, get_password_hash


# --- Test Database Setup ---
# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool for in-memory SQLite to persist connections
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(name="db_session")
def override_get_db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def _make_user(db: Session, email: str, role: models.UserRoleEnum) -> models.User:
    user = models.User(
        email=email,
        hashed_password=get_password_hash("testpassword"),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(name="publisher")
def create_publisher(db_session: Session):
    return _make_user(db_session, "publisher@example.com", models.UserRoleEnum.authorized)


@pytest.fixture(name="other_publisher")
def create_other_publisher(db_session: Session):
    return _make_user(db_session, "rival@example.com", models.UserRoleEnum.authorized)


@pytest.fixture(name="viewer")
def create_viewer(db_session: Session):
    return _make_user(db_session, "viewer@example.com", models.UserRoleEnum.viewer)


def auth_headers(user: models.User) -> dict:
    return {"Authorization": f"Bearer {create_access_token_for(user)}"}


@pytest.fixture(name="client")
def get_client(db_session: Session):
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides = {}  # Clear overrides after the test


def point_north_of(longitude: float, latitude: float, meters: float):
    """A point ``meters`` due north along the meridian, as [lon, lat]."""
    import math
    from app.core.geo import EARTH_RADIUS_M
    return [longitude, latitude + math.degrees(meters / EARTH_RADIUS_M)]


def draft(coordinates, **overrides) -> dict:
    body = {
        "title": "Highway Billboard",
        "description": "Double-sided, lit at night",
        "size": "40x20 ft",
        "price": 15000,
        "location": {"type": "Point", "coordinates": coordinates},
        "address": "NH48, Gurugram",
        "availability": True,
    }
    body.update(overrides)
    return body
