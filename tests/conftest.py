"""Shared test fixtures for authcore."""

import sqlite3

import pytest

from authcore.auth.hasher import PasswordHasher
from authcore.auth.schemas import RegisterInput
from authcore.auth.service import AuthService
from authcore.auth.token import TokenCodec
from authcore.config import AuthConfig, Settings
from authcore.db import InMemoryIdentityStore, SQLiteIdentityStore, init_db
from authcore.main import create_app
from authcore.schema import load_schema

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef0123456789abcdef-hs512"
TEST_PASSWORD = "password1"


@pytest.fixture
def test_settings(tmp_path):
    """Settings with a real secret, cheap bcrypt and a temp database path."""
    return Settings(
        jwt_secret_key=TEST_SECRET,
        bcrypt_work_factor=4,
        database_path=str(tmp_path / "authcore.db"),
        _env_file=None,
    )


@pytest.fixture
def auth_config(test_settings):
    """Immutable auth configuration built from test settings."""
    return AuthConfig.from_settings(test_settings)


@pytest.fixture
def hasher(auth_config):
    return PasswordHasher(auth_config)


@pytest.fixture
def codec(auth_config):
    return TokenCodec(auth_config)


@pytest.fixture
def memory_store():
    return InMemoryIdentityStore()


@pytest.fixture
def sqlite_store(test_settings):
    """SQLite identity store on a fresh temp database."""
    init_db(test_settings.database_path)
    return SQLiteIdentityStore(test_settings.database_path)


@pytest.fixture
def auth_service(memory_store, hasher, codec):
    return AuthService(memory_store, hasher, codec)


@pytest.fixture
def test_db():
    """Create in-memory test database with schema."""
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA foreign_keys = ON")
    db.executescript(load_schema())
    db.commit()

    yield db

    db.close()


@pytest.fixture
def app(test_settings):
    """Flask app backed by a SQLite store on a temp database."""
    app = create_app(test_settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create test client for API testing."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def registered_user(client):
    """Register a user through the API.

    Returns a tuple of (user_json, password).
    """
    response = client.post(
        "/api/register",
        json={"email": "a@x.com", "password": TEST_PASSWORD, "full_name": "A"},
    )
    assert response.status_code == 201
    return response.get_json(), TEST_PASSWORD


@pytest.fixture
def jwt_token(client, registered_user):
    """Log the registered user in and return the JWT token string."""
    user, password = registered_user
    response = client.post(
        "/api/login",
        json={"email": user["email"], "password": password},
    )
    assert response.status_code == 200
    return response.get_json()["token"]


@pytest.fixture
def auth_headers(jwt_token):
    """Get authentication headers with JWT token."""
    return {"Authorization": f"Bearer {jwt_token}"}


@pytest.fixture
def service_user(auth_service):
    """Register a user directly through the service.

    Returns a tuple of (user, password).
    """
    user = auth_service.register(
        RegisterInput(email="a@x.com", password=TEST_PASSWORD, full_name="A")
    )
    return user, TEST_PASSWORD
