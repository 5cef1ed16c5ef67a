"""Health engine: select, execute, aggregate.

The single entry point a transport calls per request. A query never raises
for probe problems: timeouts and faults come back as Unhealthy entries.
"""

from __future__ import annotations

import logging
import time

from .aggregator import aggregate
from .executor import ProbeExecutor
from .models import AggregatedReport
from .registry import ProbeRegistry, TagPredicate, has_tag, match_all

logger = logging.getLogger(__name__)


class HealthEngine:
    """Runs tag-filtered views over a sealed probe registry."""

    def __init__(
        self,
        registry: ProbeRegistry,
        timeout: float = 30.0,
        executor: ProbeExecutor | None = None,
    ) -> None:
        registry.seal()
        self.registry = registry
        self.executor = executor or ProbeExecutor(default_timeout=timeout)

    def query(
        self, predicate: TagPredicate = match_all, timeout: float | None = None,
    ) -> AggregatedReport:
        """Run every probe matching ``predicate`` and aggregate the outcomes.

        ``timeout`` overrides the engine default for probes without their own.
        """
        t0 = time.perf_counter()
        probes = self.registry.select(predicate)
        outcomes = self.executor.execute(probes, timeout)
        total = round((time.perf_counter() - t0) * 1000, 3)

        report = aggregate([(p.name, o) for p, o in zip(probes, outcomes)], total)
        logger.debug(
            "Health query: %d probes, status=%s (%.1fms)",
            len(probes), report.status.value, total,
        )
        return report

    def query_tag(self, tag: str) -> AggregatedReport:
        return self.query(has_tag(tag))
