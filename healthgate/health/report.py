"""Report formatting for transports: wire shape and status-code mapping.

Wire shape (field names are stable)::

    {
      "status": "Healthy" | "Degraded" | "Unhealthy",
      "checks": [{"name", "status", "description", "duration_ms"}],
      "totalDuration_ms": float
    }
"""

from __future__ import annotations

import json
from typing import Any

from .models import AggregatedReport, HealthStatus

# Healthy and Degraded still accept traffic; only Unhealthy fails the probe.
STATUS_CODES: dict[HealthStatus, int] = {
    HealthStatus.HEALTHY: 200,
    HealthStatus.DEGRADED: 200,
    HealthStatus.UNHEALTHY: 503,
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache",
    "Pragma": "no-cache",
    "Expires": "Thu, 01 Jan 1970 00:00:00 GMT",
}


def http_status_for(status: HealthStatus) -> int:
    return STATUS_CODES[status]


def report_to_dict(report: AggregatedReport) -> dict[str, Any]:
    return {
        "status": report.status.value,
        "checks": [
            {
                "name": name,
                "status": outcome.status.value,
                "description": outcome.description,
                "duration_ms": float(outcome.duration_ms),
            }
            for name, outcome in report.entries.items()
        ],
        "totalDuration_ms": float(report.total_duration_ms),
    }


def report_to_json(report: AggregatedReport, indent: int | None = None) -> str:
    return json.dumps(report_to_dict(report), indent=indent)
