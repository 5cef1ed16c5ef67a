"""Probe executor: runs selected probes concurrently with per-probe timeouts.

Each probe gets its own daemon worker thread, so a probe blocked on network
I/O never stalls its siblings and the wall-clock cost of a batch is bounded
by the slowest probe. Timeouts are best-effort: when a probe overruns, the
executor stops waiting and reports it as timed out, but the worker thread is
left to finish on its own. Daemon workers never hold the process open at
exit. Probes should still bound their own I/O with a deadline.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import Sequence
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import replace
from typing import Any

from .errors import ProbeFailure, ProbeTimeoutError
from .models import HealthStatus, ProbeOutcome
from .registry import Probe

logger = logging.getLogger(__name__)

TIMED_OUT = "timed out"


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _elapsed_ms(started: float, finished: float) -> float:
    return round((finished - started) * 1000, 3)


def _invoke(probe: Probe, started: float) -> ProbeOutcome:
    """Run one probe on a worker thread. Never raises."""
    try:
        result = probe.run()
        if inspect.isawaitable(result):
            result = asyncio.run(_await(result))

        if isinstance(result, HealthStatus):
            result = ProbeOutcome(result)
        if not isinstance(result, ProbeOutcome):
            raise ProbeFailure(
                probe.name,
                f"Probe returned {type(result).__name__}, expected ProbeOutcome",
            )
        outcome = result
    # SystemExit and friends would otherwise end the worker without a result.
    except BaseException as e:
        if isinstance(e, ProbeFailure):
            failure = e
        else:
            failure = ProbeFailure(probe.name, str(e) or type(e).__name__)
            failure.__cause__ = e
        logger.warning("Probe '%s' failed: %s: %s", probe.name, type(e).__name__, e)
        outcome = ProbeOutcome(HealthStatus.UNHEALTHY, str(failure), error=failure)

    return replace(outcome, duration_ms=_elapsed_ms(started, time.perf_counter()))


def _spawn(probe: Probe, started: float, index: int) -> Future[ProbeOutcome]:
    """Start ``probe`` on a daemon thread; the future resolves with its outcome."""
    future: Future[ProbeOutcome] = Future()
    future.set_running_or_notify_cancel()

    def work() -> None:
        future.set_result(_invoke(probe, started))

    threading.Thread(
        target=work, name=f"healthgate-probe-{index}", daemon=True,
    ).start()
    return future


class ProbeExecutor:
    """Runs a batch of probes and returns one outcome per probe, in order."""

    def __init__(self, default_timeout: float = 30.0) -> None:
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        self.default_timeout = default_timeout

    def timeout_for(self, probe: Probe, timeout: float | None = None) -> float:
        """Per-probe timeout: the probe's own override, else the batch one."""
        own = getattr(probe, "timeout", None)
        if own is not None:
            return float(own)
        return float(timeout if timeout is not None else self.default_timeout)

    def execute(
        self, probes: Sequence[Probe], timeout: float | None = None,
    ) -> list[ProbeOutcome]:
        """Run ``probes`` concurrently and collect their outcomes.

        Returns once every probe has either completed or hit its own timeout.
        Output order matches ``probes``, never completion order.
        """
        if not probes:
            return []

        dispatched: list[tuple[Probe, float, Future[ProbeOutcome]]] = []
        for index, probe in enumerate(probes):
            started = time.perf_counter()
            dispatched.append((probe, started, _spawn(probe, started, index)))

        return [
            self._collect(probe, started, future, self.timeout_for(probe, timeout))
            for probe, started, future in dispatched
        ]

    def _collect(
        self,
        probe: Probe,
        started: float,
        future: Future[ProbeOutcome],
        timeout: float,
    ) -> ProbeOutcome:
        remaining = max(0.0, started + timeout - time.perf_counter())
        try:
            return future.result(timeout=remaining)
        except FutureTimeoutError:
            logger.warning("Probe '%s' timed out after %.3fs", probe.name, timeout)
            return ProbeOutcome(
                HealthStatus.UNHEALTHY,
                TIMED_OUT,
                duration_ms=_elapsed_ms(started, time.perf_counter()),
                error=ProbeTimeoutError(probe.name, timeout),
            )
