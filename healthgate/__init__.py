"""healthgate: tag-filtered health check aggregation for liveness / readiness."""

from healthgate.health import (
    AggregatedReport,
    DuplicateNameError,
    FunctionProbe,
    HealthEngine,
    HealthStatus,
    Probe,
    ProbeOutcome,
    ProbeRegistry,
    has_tag,
)

__all__ = [
    "AggregatedReport",
    "DuplicateNameError",
    "FunctionProbe",
    "HealthEngine",
    "HealthStatus",
    "Probe",
    "ProbeOutcome",
    "ProbeRegistry",
    "has_tag",
]
