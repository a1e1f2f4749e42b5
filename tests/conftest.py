from __future__ import annotations

import os
import tempfile

# Settings are read at import time, so they must be in place before any app module loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RESTOCK_SCHEDULER_ENABLED"] = "false"
os.environ["ENFORCE_CUSTOMER_INVENTORY_ALLOWLIST"] = "false"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="wholesale-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, get_db
from utils.auth_utils import ADMIN_ROLE, get_current_user

ADMIN_USER = {"sub": "1", "username": "admin", "role": ADMIN_ROLE, "permissions": []}


@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def app(db_session: Session):
    from main import app as fastapi_app

    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Client authenticated as an Admin."""
    app.dependency_overrides[get_current_user] = lambda: ADMIN_USER
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def client_as(app):
    """Factory for a client whose caller holds only the given permissions."""
    def make(*permissions: str, role: str = "Staff") -> TestClient:
        user = {"sub": "2", "username": "staff", "role": role, "permissions": list(permissions)}
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)
    return make
