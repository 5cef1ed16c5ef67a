"""Core data types: status, probe outcome, aggregated report."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

_SEVERITY = {"Healthy": 0, "Degraded": 1, "Unhealthy": 2}


class HealthStatus(str, Enum):
    """Tri-state health, ordered by severity: Healthy < Degraded < Unhealthy."""

    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    UNHEALTHY = "Unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity >= other.severity

    def __str__(self) -> str:
        return self.value

    @classmethod
    def worst(cls, statuses: Iterable[HealthStatus]) -> HealthStatus:
        """Most severe status in ``statuses``; Healthy when there are none."""
        return max(statuses, default=cls.HEALTHY)


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of a single probe execution. Never mutated after creation."""

    status: HealthStatus
    description: str | None = None
    duration_ms: float = 0.0
    error: BaseException | None = None
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the details mapping along with the record
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def healthy(cls, description: str | None = None, **data: Any) -> ProbeOutcome:
        return cls(HealthStatus.HEALTHY, description, data=data)

    @classmethod
    def degraded(
        cls,
        description: str | None = None,
        error: BaseException | None = None,
        **data: Any,
    ) -> ProbeOutcome:
        return cls(HealthStatus.DEGRADED, description, error=error, data=data)

    @classmethod
    def unhealthy(
        cls,
        description: str | None = None,
        error: BaseException | None = None,
        **data: Any,
    ) -> ProbeOutcome:
        return cls(HealthStatus.UNHEALTHY, description, error=error, data=data)


@dataclass(frozen=True)
class AggregatedReport:
    """Overall status plus per-probe outcomes, in registration order."""

    status: HealthStatus
    entries: Mapping[str, ProbeOutcome]
    total_duration_ms: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @property
    def is_healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY
