"""Liveness and readiness endpoints."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from folio.shared import errors
from folio.shared.database import get_db


@pytest.fixture
def unreachable_database(app, tmp_path):
    """Point get_db at a SQLite file inside a directory that does not exist."""
    dead_engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'folio.db'}")
    DeadSession = sessionmaker(bind=dead_engine)

    def dead_db():
        db = DeadSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = dead_db
    yield
    app.dependency_overrides.clear()
    dead_engine.dispose()


def test_liveness(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0
    assert "timestamp" in body


def test_readiness(client):
    response = client.get("/api/v1/health/db")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_liveness_survives_database_outage(client, unreachable_database):
    assert client.get("/api/v1/health").status_code == 200

    response = client.get("/api/v1/health/db")
    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "database": "disconnected"}


def test_environment_follows_shared_setting(client, monkeypatch):
    monkeypatch.setattr(errors, "ENVIRONMENT", "staging")
    assert client.get("/api/v1/health").json()["environment"] == "staging"
