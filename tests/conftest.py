import os
import sys
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure project root is on sys.path for 'app' imports
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PUBLIC_BASE_URL", "https://pinory.test")

from app.db.base_class import Base
from app.db import base as models_import  # noqa: F401 - ensure models are imported
from app.db.models.user import User
from app.db.models.place import Place
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import get_optional_user


@pytest.fixture
def session_factory(tmp_path):
    # File-based SQLite so the app and the test share state across connections
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    def _make_user(name: str = None) -> int:
        counter["n"] += 1
        with session_factory() as session:
            user = User(email=f"user{counter['n']}@example.com", name=name or f"User {counter['n']}")
            session.add(user)
            session.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_place(session_factory):
    def _make_place(owner_id: int, name: str = "Corner Cafe") -> int:
        with session_factory() as session:
            place = Place(name=name, address="1 Main St", lat=13.75, lng=100.5, note="Try the latte", created_by=owner_id)
            session.add(place)
            session.commit()
            return place.id

    return _make_place


@pytest.fixture
def client(session_factory):
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_optional_user] = lambda: None
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Switch the caller identity seen by the API; ``None`` means anonymous."""
    from main import app

    def _act_as(user_id):
        user = SimpleNamespace(id=user_id) if user_id is not None else None
        app.dependency_overrides[get_optional_user] = lambda: user

    return _act_as
