"""pytest configuration and fixtures for the municipal portal tests."""

import io
import json
import os

# Settings are read at import time.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

import portal.models  # noqa: F401
from portal.core.permissions import ALL_PERMISSIONS
from portal.core.security import create_access_token, hash_password
from portal.db.base import Base
from portal.db.session import get_db
from portal.models.user import User
from portal.services.storage_service import LocalStorage, storage_service


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every connection of one test."""
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
def SessionFactory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(SessionFactory):
    session = SessionFactory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    """Local public disk under ``tmp_path``, installed as the active backend."""
    backend = LocalStorage(tmp_path / "public")
    previous = storage_service._backend
    storage_service.use(backend)
    yield backend
    storage_service.use(previous)


@pytest.fixture
def make_user(db):
    """Factory for users. ``permissions`` may be a list or raw stored text."""
    counter = {"n": 0}

    def _make(role="staff", permissions=None, name=None, email=None, is_active=True, office=None):
        counter["n"] += 1
        if permissions is None or isinstance(permissions, str):
            raw = permissions
        else:
            raw = json.dumps(list(permissions))
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.gov.ph",
            hashed_password=hash_password("password123"),
            role=role,
            office=office,
            permissions_json=raw,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", permissions=ALL_PERMISSIONS, name="Admin", email="admin@example.gov.ph")


@pytest.fixture
def news_editor(make_user):
    return make_user(permissions=["news"], name="News Editor", email="news@example.gov.ph")


@pytest.fixture
def outsider(make_user):
    """Staff account holding only the tourism permission."""
    return make_user(permissions=["tourism"], name="Tourism Staff", email="tourism@example.gov.ph")


@pytest.fixture
def upload():
    """Build an UploadFile from bytes."""

    def _upload(filename="photo.jpg", data=b"\xff\xd8\xff\xe0fake-jpeg", content_type="image/jpeg"):
        return UploadFile(
            file=io.BytesIO(data),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return _upload


@pytest.fixture
def client(SessionFactory, storage):
    """TestClient bound to the test database and storage."""
    from portal.main import app

    def override_get_db():
        session = SessionFactory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}

    return _headers
