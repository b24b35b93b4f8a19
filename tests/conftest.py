"""Shared fixtures for the Folio API test suite."""
import os

# Configuration is read at import time, so it has to be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-folio"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "100000"

import pytest
from fastapi.testclient import TestClient

from folio.main import create_app
from folio.shared import security
from folio.shared.database import Base, SessionLocal, engine
from folio.shared.security import create_access_token, hash_password
from folio.taxonomy.models import Category, Tag, Technology
from folio.users.models import Role, User

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Cheap bcrypt rounds; the cost factor has its own test."""
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def app():
    """A fresh application per test so rate limiter state never leaks."""
    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _persist(obj):
    session = SessionLocal()
    try:
        session.add(obj)
        session.commit()
        session.refresh(obj)
        return obj
    finally:
        session.close()


@pytest.fixture
def create_user():
    def factory(username: str, role: Role = Role.USER, is_active: bool = True, password: str = PASSWORD) -> User:
        return _persist(User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        ))

    return factory


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user: auth_headers(alice)."""
    def build(user: User) -> dict:
        token = create_access_token(user.id, user.username, user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def alice(create_user) -> User:
    return create_user("alice", role=Role.AUTHOR)


@pytest.fixture
def bob(create_user) -> User:
    return create_user("bob")


@pytest.fixture
def admin(create_user) -> User:
    return create_user("root", role=Role.ADMIN)


@pytest.fixture
def category() -> Category:
    return _persist(Category(name="Technology", slug="technology"))


@pytest.fixture
def other_category() -> Category:
    return _persist(Category(name="Travel", slug="travel"))


@pytest.fixture
def tags() -> list[Tag]:
    return [
        _persist(Tag(name="Python", slug="python")),
        _persist(Tag(name="FastAPI", slug="fastapi")),
        _persist(Tag(name="Testing", slug="testing")),
    ]


@pytest.fixture
def technologies() -> list[Technology]:
    return [
        _persist(Technology(name="PostgreSQL", slug="postgresql")),
        _persist(Technology(name="Docker", slug="docker")),
        _persist(Technology(name="React", slug="react")),
    ]
