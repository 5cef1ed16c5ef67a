"""Tests for the probe catalog and startup registry wiring."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
import yaml

from healthgate.config import Settings
from healthgate.health.catalog import (
    ProbeDef,
    build_probe,
    build_registry,
    default_catalog,
    load_catalog,
)
from healthgate.health.errors import DuplicateNameError, ProbeConfigError
from healthgate.health.models import HealthStatus
from healthgate.health.registry import has_tag


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Create a minimal probes.yaml for testing."""
    data = {
        "probes": [
            {"name": "self", "type": "self", "tags": ["live"]},
            {
                "name": "api",
                "type": "http",
                "url": "https://api.test.example.com/health",
                "expected_status": 204,
                "timeout_ms": 5000,
                "timeout_seconds": 7.5,
                "tags": ["ready", "http"],
            },
            {"name": "cert", "type": "tls", "hostname": "test.example.com", "warn_days_before": 30},
            {"name": "redis", "type": "tcp", "hostname": "localhost", "port": 6379, "tags": "ready"},
        ]
    }
    yml_path = tmp_path / "probes.yaml"
    yml_path.write_text(yaml.dump(data))
    return yml_path


class TestLoadCatalog:
    def test_load(self, sample_yaml: Path) -> None:
        defs = load_catalog(sample_yaml)
        assert [d.name for d in defs] == ["self", "api", "cert", "redis"]

        api = defs[1]
        assert api.type == "http"
        assert api.expected_status == 204
        assert api.timeout_ms == 5000
        assert api.timeout_seconds == 7.5
        assert api.tags == ["ready", "http"]

        assert defs[2].warn_days_before == 30
        assert defs[2].tags == []
        assert defs[3].port == 6379
        assert defs[3].tags == ["ready"]  # scalar tag promoted to a list

    def test_empty_yaml(self, tmp_path: Path) -> None:
        yml = tmp_path / "empty.yaml"
        yml.write_text("probes: []")
        assert load_catalog(yml) == []

    def test_missing_name(self, tmp_path: Path) -> None:
        yml = tmp_path / "bad.yaml"
        yml.write_text(yaml.dump({"probes": [{"type": "self"}]}))
        with pytest.raises(ProbeConfigError):
            load_catalog(yml)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        yml = tmp_path / "broken.yaml"
        yml.write_text("probes: [unclosed")
        with pytest.raises(ProbeConfigError):
            load_catalog(yml)

    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        yml = tmp_path / "list.yaml"
        yml.write_text(yaml.dump([{"name": "self"}]))
        with pytest.raises(ProbeConfigError):
            load_catalog(yml)

    @pytest.mark.parametrize("field, value", [
        ("port", "redis"),
        ("port", None),
        ("expected_status", "ok"),
        ("timeout_ms", [5000]),
        ("warn_days_before", "soon"),
        ("timeout_seconds", "fast"),
    ])
    def test_malformed_number(self, tmp_path: Path, field: str, value: object) -> None:
        yml = tmp_path / "bad.yaml"
        yml.write_text(yaml.dump({"probes": [
            {"name": "redis", "type": "tcp", "hostname": "localhost", field: value},
        ]}))
        with pytest.raises(ProbeConfigError, match=field):
            load_catalog(yml)

    @pytest.mark.parametrize("field", ["timeout_ms", "timeout_seconds", "port"])
    def test_non_positive_number(self, tmp_path: Path, field: str) -> None:
        yml = tmp_path / "bad.yaml"
        yml.write_text(yaml.dump({"probes": [
            {"name": "redis", "type": "tcp", "hostname": "localhost", field: 0},
        ]}))
        with pytest.raises(ProbeConfigError, match="positive"):
            load_catalog(yml)


class TestBuildProbe:
    def test_unknown_type(self) -> None:
        with pytest.raises(ProbeConfigError):
            build_probe(ProbeDef(name="x", type="foobar"))

    def test_missing_required_field(self) -> None:
        with pytest.raises(ProbeConfigError):
            build_probe(ProbeDef(name="api", type="http"))

    def test_self_probe(self) -> None:
        probe = build_probe(ProbeDef(name="self", type="self", tags=["live"]))
        assert probe.tags == frozenset({"live"})
        assert probe.run().status is HealthStatus.HEALTHY

    def test_sqlite_probe(self, tmp_path: Path) -> None:
        db = tmp_path / "app.db"
        sqlite3.connect(db).close()
        probe = build_probe(ProbeDef(name="db", type="sqlite", path=str(db)))
        assert probe.run().status is HealthStatus.HEALTHY

    def test_dns_probe_carries_timeout(self) -> None:
        probe = build_probe(ProbeDef(name="dns", type="dns", hostname="example.com", timeout_ms=2500))
        assert probe.func.args == ("example.com", 2500)

    def test_timeout_override_carried(self) -> None:
        probe = build_probe(ProbeDef(name="s", type="self", timeout_seconds=1.5))
        assert probe.timeout == 1.5


class TestBuildRegistry:
    def test_from_file(self, sample_yaml: Path) -> None:
        registry = build_registry(Settings(probes_file=str(sample_yaml)))
        assert registry.names() == ["self", "api", "cert", "redis"]
        assert [p.name for p in registry.select(has_tag("ready"))] == ["api", "redis"]

    def test_duplicate_names_fail_startup(self, tmp_path: Path) -> None:
        yml = tmp_path / "dup.yaml"
        yml.write_text(yaml.dump({"probes": [
            {"name": "self", "type": "self"},
            {"name": "self", "type": "self"},
        ]}))
        with pytest.raises(DuplicateNameError):
            build_registry(Settings(probes_file=str(yml)))

    def test_defaults_without_database(self, tmp_path: Path) -> None:
        registry = build_registry(Settings(probes_file=str(tmp_path / "missing.yaml"), database_url=""))
        assert registry.names() == ["self"]
        assert registry.get("self").tags == frozenset({"live"})

    def test_defaults_with_database(self, tmp_path: Path) -> None:
        settings = Settings(
            probes_file=str(tmp_path / "missing.yaml"),
            database_url=str(tmp_path / "app.db"),
        )
        defs = default_catalog(settings)
        assert [d.name for d in defs] == ["self", "SQL Connection"]
        assert defs[1].tags == ["db", "sql", "ready"]

        registry = build_registry(settings)
        [db_probe] = registry.select(has_tag("ready"))
        # database file does not exist yet → not ready
        assert db_probe.run().status is HealthStatus.UNHEALTHY
