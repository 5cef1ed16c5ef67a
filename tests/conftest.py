"""Shared test fixtures."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator

import pytest

from healthgate.health.models import HealthStatus, ProbeOutcome
from healthgate.health.registry import ProbeRegistry


@pytest.fixture
def release() -> Iterator[threading.Event]:
    """Event that unblocks hanging probes at teardown so no worker outlives a test."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def hanging(release: threading.Event) -> Callable[[], ProbeOutcome]:
    """A probe body that blocks until the test finishes."""

    def run() -> ProbeOutcome:
        release.wait(timeout=10)
        return ProbeOutcome.healthy("finally returned")

    return run


@pytest.fixture
def sleeper() -> Callable[..., Callable[[], ProbeOutcome]]:
    """Factory for probe bodies that sleep, then report ``status``."""

    def make(seconds: float, status: HealthStatus = HealthStatus.HEALTHY) -> Callable[[], ProbeOutcome]:
        def run() -> ProbeOutcome:
            time.sleep(seconds)
            return ProbeOutcome(status, f"slept {seconds}s")

        return run

    return make


@pytest.fixture
def registry() -> ProbeRegistry:
    """The liveness / readiness pair from a typical web service."""
    reg = ProbeRegistry()
    reg.add_check("self", ProbeOutcome.healthy, tags=["live"])
    reg.add_check(
        "db",
        lambda: ProbeOutcome.unhealthy("connection refused"),
        tags=["db", "sql", "ready"],
    )
    return reg
