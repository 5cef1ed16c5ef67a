"""Combines probe outcomes into an overall report."""

from __future__ import annotations

from collections.abc import Sequence

from .models import AggregatedReport, HealthStatus, ProbeOutcome


def aggregate(
    outcomes: Sequence[tuple[str, ProbeOutcome]], total_duration_ms: float,
) -> AggregatedReport:
    """Build a report whose status is the most severe outcome status.

    Entries keep the order of ``outcomes``. No outcomes means Healthy.
    """
    entries: dict[str, ProbeOutcome] = {}
    for name, outcome in outcomes:
        if name in entries:
            raise ValueError(f"Duplicate outcome for probe '{name}'")
        entries[name] = outcome

    status = HealthStatus.worst(o.status for o in entries.values())
    return AggregatedReport(
        status=status, entries=entries, total_duration_ms=total_duration_ms,
    )
