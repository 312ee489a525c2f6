import os
import tempfile

# Point settings at SQLite before rentals.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="rentals-uploads-"))

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rentals.config import get_settings
from rentals.database import Base, build_engine, get_db
from rentals.main import app
from rentals.models import User
from rentals.seed import seed_amenities
from rentals.services.auth import get_password_hash
from rentals.services.storage import ImageStorage, get_storage

# ---------- TEST FIXTURES ----------


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_amenities(db)
    finally:
        db.close()
    return factory


@pytest.fixture
def db(session_factory):
    """A session for service-level tests. Do not mix with `client` in one test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    settings = get_settings().model_copy(update={"upload_dir": str(tmp_path)})
    return ImageStorage(settings)


@pytest.fixture
def client(session_factory, storage):
    """Override get_db and the image storage for FastAPI TestClient."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------- TEST DATA HELPERS ----------


def make_user(db, name="Alice", email="alice@example.com", is_host=False, is_admin=False):
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash("secret123"),
        is_host=is_host,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register(client, name, email, is_host=False, password="secret123"):
    r = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "is_host": is_host},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    return body["user"], {"Authorization": f"Bearer {body['access_token']}"}


def house_payload(**overrides):
    data = {
        "title": "Lake House",
        "description": "Quiet place by the lake",
        "address": "1 Shore Rd",
        "city": "Annecy",
        "price_per_day": 100,
        "max_guests": 4,
        "property_type": "House",
        "total_bedrooms": 3,
    }
    data.update(overrides)
    return data


def future(days):
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
def users(client):
    """admin (first account), host and guest, each as (user dict, auth headers)."""
    return {
        "admin": register(client, "Admin", "admin@example.com"),
        "host": register(client, "Hana Host", "host@example.com", is_host=True),
        "guest": register(client, "Gus Guest", "guest@example.com"),
    }


@pytest.fixture
def listing(client, users):
    _, headers = users["host"]
    r = client.post("/api/properties", json=house_payload(), headers=headers)
    assert r.status_code == 201, r.text
    return r.json()
