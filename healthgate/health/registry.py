"""Probe registry: the fixed set of probes a process reports on.

Built once during startup, sealed before the first query and read-only from
then on, so concurrent requests can select from it without locking.
Views (liveness, readiness, ...) are tag predicates over this one registry.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

from .errors import DuplicateNameError, RegistrySealedError
from .models import HealthStatus, ProbeOutcome

logger = logging.getLogger(__name__)

ProbeResult = Union[ProbeOutcome, HealthStatus]
ProbeCallable = Callable[[], Union[ProbeResult, Awaitable[ProbeResult]]]
TagPredicate = Callable[[frozenset[str]], bool]


# ── Probe contract ───────────────────────────────────────────────────────────


@runtime_checkable
class Probe(Protocol):
    """Anything with a name, a tag set and a ``run`` returning an outcome.

    ``run`` may block (network I/O) or be a coroutine function. ``timeout``
    is an optional per-probe override in seconds.
    """

    name: str
    tags: frozenset[str]
    timeout: float | None

    def run(self) -> ProbeResult | Awaitable[ProbeResult]: ...


@dataclass(frozen=True)
class FunctionProbe:
    """Adapts a plain callable into a Probe."""

    name: str
    func: ProbeCallable
    tags: frozenset[str] = field(default_factory=frozenset)
    timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))

    def run(self) -> ProbeResult | Awaitable[ProbeResult]:
        return self.func()


# ── Predicates ───────────────────────────────────────────────────────────────


def match_all(tags: frozenset[str]) -> bool:
    return True


def has_tag(tag: str) -> TagPredicate:
    """Select probes carrying ``tag``."""
    return lambda tags: tag in tags


def has_any_tag(*wanted: str) -> TagPredicate:
    wanted_set = frozenset(wanted)
    return lambda tags: not wanted_set.isdisjoint(tags)


def has_all_tags(*wanted: str) -> TagPredicate:
    wanted_set = frozenset(wanted)
    return lambda tags: wanted_set <= tags


# ── Registry ─────────────────────────────────────────────────────────────────


class ProbeRegistry:
    """Ordered, name-unique collection of probes."""

    def __init__(self, probes: Iterable[Probe] = ()) -> None:
        self._probes: dict[str, Probe] = {}
        self._sealed = False
        for probe in probes:
            self.register(probe)

    def register(self, probe: Probe) -> Probe:
        """Add a probe. Fails on a repeated name or once sealed."""
        if self._sealed:
            raise RegistrySealedError(probe.name)
        if not probe.name:
            raise ValueError("Probe name must be a non-empty string")
        if probe.name in self._probes:
            raise DuplicateNameError(probe.name)
        self._probes[probe.name] = probe
        logger.debug("Registered probe '%s' tags=%s", probe.name, sorted(probe.tags))
        return probe

    def add_check(
        self,
        name: str,
        func: ProbeCallable,
        tags: Iterable[str] = (),
        timeout: float | None = None,
    ) -> Probe:
        """Register a plain callable as a probe."""
        return self.register(FunctionProbe(name, func, frozenset(tags), timeout))

    def seal(self) -> None:
        """Freeze the registry; later ``register`` calls raise."""
        if not self._sealed:
            self._sealed = True
            logger.info("Probe registry sealed with %d probes", len(self._probes))

    @property
    def sealed(self) -> bool:
        return self._sealed

    def select(self, predicate: TagPredicate = match_all) -> list[Probe]:
        """Probes whose tag set satisfies ``predicate``, in registration order."""
        return [p for p in self._probes.values() if predicate(frozenset(p.tags))]

    def get(self, name: str) -> Probe | None:
        return self._probes.get(name)

    def names(self) -> list[str]:
        return list(self._probes)

    def __len__(self) -> int:
        return len(self._probes)

    def __iter__(self):
        return iter(list(self._probes.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._probes

    def to_dict(self) -> list[dict[str, object]]:
        """Serialize probe metadata for the API."""
        return [
            {"name": p.name, "tags": sorted(p.tags), "timeout": getattr(p, "timeout", None)}
            for p in self._probes.values()
        ]
