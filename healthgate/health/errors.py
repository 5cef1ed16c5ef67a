"""Error taxonomy for the health engine.

Startup errors (duplicate names, late registration, bad catalog entries) are
raised and abort boot. Per-probe errors (timeouts, faults) are never raised
out of a query: the executor records them on the outcome instead.
"""

from __future__ import annotations


class HealthEngineError(Exception):
    """Base class for all health engine errors."""


class DuplicateNameError(HealthEngineError, ValueError):
    """A probe with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Probe '{name}' is already registered")
        self.name = name


class RegistrySealedError(HealthEngineError, RuntimeError):
    """Registration attempted after the registry started serving queries."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot register probe '{name}': registry is sealed")
        self.name = name


class ProbeConfigError(HealthEngineError, ValueError):
    """A probe catalog entry is malformed."""


class ProbeTimeoutError(HealthEngineError, TimeoutError):
    """A probe did not complete within its timeout."""

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"Probe '{name}' timed out after {timeout:g}s")
        self.name = name
        self.timeout = timeout


class ProbeFailure(HealthEngineError):
    """A probe raised, or returned something that is not an outcome."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name
