"""Shared fixtures: in-memory SQLite, fast password hashing, a TestClient."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_SECRET_KEY"] = "test-admin-secret"
os.environ["PASSWORD_SCHEMES"] = '["pbkdf2_sha256"]'
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("DEFAULT_ADMIN_EMAIL", None)
os.environ.pop("DEFAULT_ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.domain.models.user import User
from app.infrastructure.database import Base, SessionLocal, engine
from app.infrastructure.repositories.address_repository import SQLAlchemyAddressRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

REGISTER_URL = "/api/users/register"
LOGIN_URL = "/api/users/login"
ME_URL = "/api/users/me"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    return SQLAlchemyUserRepository(db, User)


@pytest.fixture
def addresses(db):
    return SQLAlchemyAddressRepository(db)


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registration():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "password": "analytical-engine",
        "phone": "555-0100",
    }


@pytest.fixture
def register(client, registration):
    """Register an account and return the response body."""

    def _register(**overrides):
        payload = {**registration, **overrides}
        response = client.post(REGISTER_URL, json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers():
    def _headers(token):
        return {"Authorization": f"Bearer {token}"}

    return _headers
