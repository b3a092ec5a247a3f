"""Tests for operational endpoints"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from main import app
from natours.core.rate_limit import limiter


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", False)
    return TestClient(app)


class TestHealthEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "natours-service"

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/api/health/live").json()["status"] == "alive"

    def test_readiness_when_database_answers(self, client):
        mongo = MagicMock()
        mongo.admin.command = AsyncMock(return_value={"ok": 1})

        with patch("natours.api.health.db") as mock_db:
            mock_db.client = mongo
            response = client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_readiness_without_database(self, client):
        with patch("natours.api.health.db") as mock_db:
            mock_db.client = None
            response = client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"][0]["status"] == "unhealthy"
