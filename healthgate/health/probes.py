"""Built-in probe implementations.

Supports: self, HTTP(S), TLS cert expiry, DNS resolve, TCP connect and
DB-API connectivity (``SELECT 1``). Each runner bounds its own I/O with
``timeout_ms`` and returns a ProbeOutcome; anything unexpected is reported
as Unhealthy rather than raised.
"""

from __future__ import annotations

import socket
import sqlite3
import ssl
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime, timezone
from typing import Any

import httpx

from .models import ProbeOutcome

SLOW_RESPONSE_MS = 3000


def _latency(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 1)


def self_check() -> ProbeOutcome:
    """Liveness: if this runs at all, the process is up."""
    return ProbeOutcome.healthy()


HEALTH_BODY_KEYS = ("status", "version", "commit", "deps")


def _health_body(resp: httpx.Response) -> dict[str, Any]:
    """Well-known fields of a JSON health body, if the target serves one."""
    try:
        body = resp.json()
    except ValueError:  # not JSON
        return {}
    if not isinstance(body, dict):
        return {}
    fields = {k: body[k] for k in HEALTH_BODY_KEYS if k in body}
    return {"body": fields} if fields else {}


def run_http_check(
    url: str,
    method: str = "GET",
    expected_status: int = 200,
    timeout_ms: int = 10_000,
) -> ProbeOutcome:
    """HTTP(S) check: status code + latency, Degraded when slow."""
    t0 = time.perf_counter()
    try:
        with httpx.Client(timeout=timeout_ms / 1000, follow_redirects=True, verify=True) as client:
            resp = client.request(method, url)
        latency = _latency(t0)
        data = {"status_code": resp.status_code, "latency_ms": latency, **_health_body(resp)}

        if resp.status_code != expected_status:
            return ProbeOutcome.unhealthy(
                f"Expected {expected_status}, got {resp.status_code}", **data,
            )
        if latency > SLOW_RESPONSE_MS:
            return ProbeOutcome.degraded(
                f"{resp.status_code} OK but slow ({latency:.0f}ms)", **data,
            )
        return ProbeOutcome.healthy(f"{resp.status_code} OK", **data)
    except httpx.TimeoutException as e:
        return ProbeOutcome.unhealthy(f"Request timed out ({timeout_ms}ms)", error=e)
    except httpx.ConnectError as e:
        return ProbeOutcome.unhealthy(f"Connection error: {e}", error=e)
    except Exception as e:
        return ProbeOutcome.unhealthy(f"Error: {type(e).__name__}: {e}", error=e)


def run_tls_check(
    hostname: str,
    port: int = 443,
    warn_days_before: int = 14,
    timeout_ms: int = 10_000,
) -> ProbeOutcome:
    """Check TLS certificate expiry."""
    try:
        ctx = ssl.create_default_context()
        with socket.create_connection((hostname, port), timeout=timeout_ms / 1000) as sock:
            with ctx.wrap_socket(sock, server_hostname=hostname) as ssock:
                cert = ssock.getpeercert()

        if not cert:
            return ProbeOutcome.unhealthy("No certificate returned")

        not_after = cert.get("notAfter", "")
        expiry = datetime.strptime(not_after, "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)
        days_left = (expiry - datetime.now(timezone.utc)).days
        data = {"days_left": days_left, "expiry": expiry.isoformat()}

        if days_left < 0:
            return ProbeOutcome.unhealthy(f"Certificate EXPIRED {-days_left} days ago", **data)
        if days_left < warn_days_before:
            return ProbeOutcome.degraded(
                f"Certificate expires in {days_left} days (warn < {warn_days_before})", **data,
            )
        return ProbeOutcome.healthy(f"Certificate valid, expires in {days_left} days", **data)
    except Exception as e:
        return ProbeOutcome.unhealthy(f"TLS error: {type(e).__name__}: {e}", error=e)


def _resolve(hostname: str, timeout: float) -> list[Any]:
    """``getaddrinfo`` with a deadline, on a daemon thread of its own."""
    future: Future[list[Any]] = Future()

    def work() -> None:
        try:
            future.set_result(socket.getaddrinfo(hostname, None))
        except Exception as e:
            future.set_exception(e)

    threading.Thread(target=work, name=f"healthgate-dns-{hostname}", daemon=True).start()
    return future.result(timeout=timeout)


def run_dns_check(hostname: str, timeout_ms: int = 5_000) -> ProbeOutcome:
    """DNS resolution check."""
    try:
        addrs = _resolve(hostname, timeout_ms / 1000)
    except socket.gaierror as e:
        return ProbeOutcome.unhealthy(f"DNS resolution failed: {e}", error=e)
    except FutureTimeoutError as e:
        return ProbeOutcome.unhealthy(f"DNS resolution timed out ({timeout_ms}ms)", error=e)
    except Exception as e:
        return ProbeOutcome.unhealthy(f"DNS error: {type(e).__name__}: {e}", error=e)

    ips = sorted({a[4][0] for a in addrs})
    return ProbeOutcome.healthy(f"Resolved to {', '.join(ips[:3])}", ips=ips)


def run_tcp_check(hostname: str, port: int, timeout_ms: int = 5_000) -> ProbeOutcome:
    """Raw TCP port connectivity check."""
    try:
        sock = socket.create_connection((hostname, port), timeout=timeout_ms / 1000)
        sock.close()
    except Exception as e:
        return ProbeOutcome.unhealthy(f"TCP connect failed: {type(e).__name__}: {e}", error=e)
    return ProbeOutcome.healthy(f"Port {port} open")


def run_database_check(connect: Callable[[], Any], query: str = "SELECT 1") -> ProbeOutcome:
    """Open a DB-API connection, run ``query`` and close it."""
    try:
        conn = connect()
        try:
            conn.cursor().execute(query)
        finally:
            conn.close()
    except Exception as e:
        return ProbeOutcome.unhealthy(str(e) or type(e).__name__, error=e)
    return ProbeOutcome.healthy()


def sqlite_connector(path: str, timeout_ms: int = 5_000) -> Callable[[], sqlite3.Connection]:
    """Connection factory for a SQLite database that must already exist."""

    def connect() -> sqlite3.Connection:
        uri = f"file:{path}?mode=rw"
        return sqlite3.connect(uri, uri=True, timeout=timeout_ms / 1000, check_same_thread=False)

    return connect
