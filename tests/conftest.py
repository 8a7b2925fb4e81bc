import os
import tempfile

# main builds a module-level app on import; keep its side effects out of the repo
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="complaint-uploads-"))

import mongomock
import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.security import AUTH_HEADER, create_access_token, hash_password
from main import create_app
from models import Role, User

TEST_DB = "complaints_test"


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("MONGO_URI", f"mongodb://localhost:27017/{TEST_DB}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("LOG_DIR", "")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000,https://complaints.example.com")
    monkeypatch.delenv("API_PREFIX", raising=False)
    monkeypatch.delenv("MAX_IMAGE_UPLOAD_BYTES", raising=False)
    monkeypatch.delenv("DEFAULT_ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("DEFAULT_ADMIN_PASSWORD", raising=False)
    return Settings()


@pytest.fixture
def app(settings):
    return create_app(settings, mongo_client_class=mongomock.MongoClient)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
        app.state.db.client.drop_database(TEST_DB)


@pytest.fixture
def make_user(client):
    def _make(name, email, role=Role.CITIZEN, password="secret123"):
        return User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
        ).save()

    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        token = create_access_token({"user_id": str(user.id), "role": user.role}, settings)
        return {AUTH_HEADER: token}

    return _headers


@pytest.fixture
def citizen(make_user):
    return make_user("Asha Rao", "asha@example.com")


@pytest.fixture
def other_citizen(make_user):
    return make_user("Ben Okafor", "ben@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("Ward Admin", "admin@example.com", role=Role.ADMIN)


@pytest.fixture
def new_complaint(client, citizen, auth_headers):
    def _create(title="Pothole on Main St", category="Road", user=None, **extra):
        data = {
            "title": title,
            "description": "Deep pothole near the bus stop",
            "category": category,
            "location": "Main St & 4th Ave",
        }
        data.update(extra)
        response = client.post("/api/complaints", data=data, headers=auth_headers(user or citizen))
        assert response.status_code == 200, response.text
        return response.json()

    return _create
