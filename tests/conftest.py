import os
import tempfile

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="mayspace-uploads-")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mayspace.database import enable_sqlite_foreign_keys, get_db
from mayspace.db.base import Base
from mayspace.main import app
import mayspace.models  # noqa: F401


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(client):
    """Register a user over the API and return its id."""
    def _make_user(username, password="secret123", name=None):
        response = client.post("/user/register", json={
            "name": name or username.title(),
            "username": username,
            "email": f"{username}@example.com",
            "contactNumber": "09171234567",
            "password": password,
        })
        assert response.status_code == 201, response.text
        return response.json()["user"]["id"]
    return _make_user


@pytest.fixture()
def make_admin(client):
    def _make_admin(username="root", password="adminpass"):
        response = client.post("/admin/register", json={
            "username": username,
            "email": f"{username}@mayspace.io",
            "contactNumber": "09170000000",
            "password": password,
        })
        assert response.status_code == 201, response.text
        return response.json()["admin"]["id"]
    return _make_admin


@pytest.fixture()
def make_unit(client):
    """Post a unit as ``owner_id`` and return the unit payload."""
    def _make_unit(owner_id, **overrides):
        body = {
            "buildingName": "Sunrise Tower",
            "unitNumber": "12B",
            "location": "Makati",
            "specs": "2 bedrooms, 1 bath",
            "specialFeatures": "Balcony",
            "unitPrice": 15000,
            "contactPerson": "Ana",
            "phoneNumber": "09179998888",
            "images": [],
        }
        body.update(overrides)
        response = client.post("/units", json=body, headers=user_headers(owner_id))
        assert response.status_code == 201, response.text
        return response.json()["unit"]
    return _make_unit


@pytest.fixture()
def make_booking(client):
    def _make_booking(renter_id, unit_id, **overrides):
        body = {
            "unitId": unit_id,
            "name": "Renter",
            "address": "1 Main St",
            "contactNumber": "09171112222",
            "numberOfPeople": 2,
            "transaction": "Online",
            "dateVisiting": "2026-11-02",
        }
        body.update(overrides)
        return client.post("/bookings", json=body, headers=user_headers(renter_id))
    return _make_booking


def user_headers(user_id):
    return {"X-User-ID": str(user_id)}


def admin_headers(admin_id):
    return {"X-Admin-ID": str(admin_id)}
