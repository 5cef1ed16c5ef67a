"""Probe catalog: loads probes.yaml and builds the startup registry.

When no catalog file exists the registry falls back to the default wiring:
a ``self`` liveness probe plus a SQL connectivity readiness probe when a
database is configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import yaml

from ..config import Settings
from .errors import ProbeConfigError
from .probes import (
    run_database_check,
    run_dns_check,
    run_http_check,
    run_tcp_check,
    run_tls_check,
    self_check,
    sqlite_connector,
)
from .registry import FunctionProbe, ProbeRegistry

logger = logging.getLogger(__name__)


# ── Data model ───────────────────────────────────────────────────────────────


@dataclass
class ProbeDef:
    """Definition of a single probe from the catalog."""

    name: str
    type: str  # self | http | tcp | dns | tls | sqlite
    tags: list[str] = field(default_factory=list)
    url: str = ""
    hostname: str = ""
    port: int = 443
    method: str = "GET"
    expected_status: int = 200
    timeout_ms: int = 10_000
    warn_days_before: int = 14  # for TLS checks
    path: str = ""  # for sqlite checks
    timeout_seconds: float | None = None  # executor override


# ── Builders ─────────────────────────────────────────────────────────────────


def _require(d: ProbeDef, attr: str) -> Any:
    value = getattr(d, attr)
    if not value:
        raise ProbeConfigError(f"Probe '{d.name}' of type '{d.type}' requires '{attr}'")
    return value


PROBE_BUILDERS = {
    "self": lambda d: self_check,
    "http": lambda d: partial(
        run_http_check, _require(d, "url"), d.method, d.expected_status, d.timeout_ms,
    ),
    "tls": lambda d: partial(
        run_tls_check, _require(d, "hostname"), d.port, d.warn_days_before, d.timeout_ms,
    ),
    "dns": lambda d: partial(run_dns_check, _require(d, "hostname"), d.timeout_ms),
    "tcp": lambda d: partial(run_tcp_check, _require(d, "hostname"), d.port, d.timeout_ms),
    "sqlite": lambda d: partial(
        run_database_check, sqlite_connector(_require(d, "path"), d.timeout_ms),
    ),
}


def build_probe(d: ProbeDef) -> FunctionProbe:
    builder = PROBE_BUILDERS.get(d.type)
    if builder is None:
        raise ProbeConfigError(f"Probe '{d.name}' has unknown type: {d.type}")
    return FunctionProbe(d.name, builder(d), frozenset(d.tags), d.timeout_seconds)


# ── Parsing ──────────────────────────────────────────────────────────────────


def _number(raw: dict[str, Any], name: str, key: str, default: Any, cast: type = int) -> Any:
    """``raw[key]`` converted with ``cast``; must be positive."""
    value = raw.get(key, default)
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ProbeConfigError(f"Probe '{name}': '{key}' must be a number, got {value!r}") from e
    if number <= 0:
        raise ProbeConfigError(f"Probe '{name}': '{key}' must be positive, got {value!r}")
    return number


def _parse_probe(raw: Any) -> ProbeDef:
    if not isinstance(raw, dict):
        raise ProbeConfigError(f"Probe entry must be a mapping, got {type(raw).__name__}")
    name = str(raw.get("name") or "").strip()
    if not name:
        raise ProbeConfigError("Probe 'name' is required")

    tags = raw.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]

    timeout_seconds = None
    if raw.get("timeout_seconds") is not None:
        timeout_seconds = _number(raw, name, "timeout_seconds", None, float)

    return ProbeDef(
        name=name,
        type=raw.get("type", "self"),
        tags=[str(t) for t in tags],
        url=raw.get("url", ""),
        hostname=raw.get("hostname", ""),
        port=_number(raw, name, "port", 443),
        method=raw.get("method", "GET"),
        expected_status=_number(raw, name, "expected_status", 200),
        timeout_ms=_number(raw, name, "timeout_ms", 10_000),
        warn_days_before=_number(raw, name, "warn_days_before", 14),
        path=raw.get("path", ""),
        timeout_seconds=timeout_seconds,
    )


def load_catalog(path: Path) -> list[ProbeDef]:
    """Parse a probes.yaml file. Malformed files fail startup."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ProbeConfigError(f"Failed to parse {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ProbeConfigError(f"{path}: top level must be a mapping with a 'probes' list")

    defs = [_parse_probe(entry) for entry in raw.get("probes") or []]
    logger.info("Loaded %d probes from %s", len(defs), path)
    return defs


def default_catalog(settings: Settings) -> list[ProbeDef]:
    """Self liveness probe, plus SQL connectivity when a database is set."""
    defs = [ProbeDef(name="self", type="self", tags=[settings.live_tag])]
    if settings.database_url:
        defs.append(ProbeDef(
            name="SQL Connection",
            type="sqlite",
            tags=["db", "sql", settings.ready_tag],
            path=settings.database_url,
        ))
    return defs


def build_registry(settings: Settings) -> ProbeRegistry:
    """Registry from the configured catalog file, or the default wiring."""
    path = Path(settings.probes_file)
    if path.exists():
        defs = load_catalog(path)
    else:
        logger.info("Probe catalog not found at %s, using defaults", path)
        defs = default_catalog(settings)

    registry = ProbeRegistry()
    for d in defs:
        registry.register(build_probe(d))
    return registry
