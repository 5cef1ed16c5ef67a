"""Tests for the FastAPI routes."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from healthgate.api.server import create_app
from healthgate.config import settings
from healthgate.health.engine import HealthEngine
from healthgate.health.models import ProbeOutcome
from healthgate.health.registry import ProbeRegistry


@pytest.fixture
def client(registry: ProbeRegistry) -> TestClient:
    return TestClient(create_app(HealthEngine(registry, timeout=2.0)))


@pytest.fixture
def healthy_client() -> TestClient:
    reg = ProbeRegistry()
    reg.add_check("self", ProbeOutcome.healthy, tags=["live"])
    reg.add_check("cache", lambda: ProbeOutcome.degraded("warming up"), tags=["ready"])
    return TestClient(create_app(HealthEngine(reg)))


class TestHealthRoutes:
    def test_liveness(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "Healthy"
        assert [c["name"] for c in data["checks"]] == ["self"]
        assert set(data["checks"][0]) == {"name", "status", "description", "duration_ms"}
        assert isinstance(data["totalDuration_ms"], float)

    def test_readiness_unhealthy(self, client: TestClient) -> None:
        resp = client.get("/health/ready")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "Unhealthy"
        assert data["checks"][0]["name"] == "db"
        assert data["checks"][0]["description"] == "connection refused"

    def test_degraded_is_still_200(self, healthy_client: TestClient) -> None:
        resp = healthy_client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["status"] == "Degraded"

    def test_tag_view(self, client: TestClient) -> None:
        resp = client.get("/health/tags/sql")
        assert resp.status_code == 503
        assert [c["name"] for c in resp.json()["checks"]] == ["db"]

    def test_tag_view_no_match(self, client: TestClient) -> None:
        resp = client.get("/health/tags/unknown")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "Healthy"
        assert data["checks"] == []

    def test_no_cache_headers(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert "no-store" in resp.headers["cache-control"]

    def test_list_checks(self, client: TestClient) -> None:
        resp = client.get("/health/checks")
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        assert data["checks"][0] == {"name": "self", "tags": ["live"], "timeout": None}

    def test_root(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "Application is running!"

    def test_cors(self, client: TestClient) -> None:
        resp = client.get("/health", headers={"Origin": "https://lb.example.com"})
        assert resp.headers["access-control-allow-origin"] == "*"


class TestLifespan:
    def test_builds_engine_from_catalog(self, tmp_path: Path, monkeypatch) -> None:
        catalog = tmp_path / "probes.yaml"
        catalog.write_text(yaml.dump({"probes": [
            {"name": "self", "type": "self", "tags": ["live"]},
        ]}))
        monkeypatch.setattr(settings, "probes_file", str(catalog))

        with TestClient(create_app()) as client:
            resp = client.get("/health")
            assert resp.status_code == 200
            assert resp.json()["checks"][0]["name"] == "self"
            assert client.get("/health/ready").json()["checks"] == []
