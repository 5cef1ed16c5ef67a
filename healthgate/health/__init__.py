"""Health subsystem: probe registry, concurrent executor, aggregator, report."""

from .aggregator import aggregate
from .engine import HealthEngine
from .errors import (
    DuplicateNameError,
    HealthEngineError,
    ProbeConfigError,
    ProbeFailure,
    ProbeTimeoutError,
    RegistrySealedError,
)
from .executor import ProbeExecutor
from .models import AggregatedReport, HealthStatus, ProbeOutcome
from .registry import (
    FunctionProbe,
    Probe,
    ProbeRegistry,
    has_all_tags,
    has_any_tag,
    has_tag,
    match_all,
)
from .report import http_status_for, report_to_dict, report_to_json
