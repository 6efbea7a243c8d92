"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("ROSTER_DATABASE_URL", "sqlite://")
os.environ.setdefault("ROSTER_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import roster.db.models  # noqa: F401  (registers mappers)
from roster.api.deps import get_db
from roster.api.main import app
from roster.core.approval import chain_provider
from roster.core.security import create_access_token
from roster.db.base import Base


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """A session on a fresh in-memory database."""
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_chain():
    """The resolved approval chain is cached process-wide; start every test empty."""
    chain_provider.invalidate()
    yield
    chain_provider.invalidate()


@pytest.fixture
def client(db_session):
    """TestClient whose requests share ``db_session``."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def login_as(db_session):
    """
    Return a function building the Authorization header for a user.

    Pending test data is committed first, so a rolled back API transaction
    cannot take the fixtures with it.
    """
    def _login_as(user) -> dict:
        db_session.commit()
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _login_as
