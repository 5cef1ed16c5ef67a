"""Entry point for healthgate: API server or one-shot health query."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from healthgate.config import settings
from healthgate.health.catalog import build_registry
from healthgate.health.engine import HealthEngine
from healthgate.health.models import AggregatedReport, HealthStatus
from healthgate.health.registry import has_tag, match_all
from healthgate.health.report import report_to_json

console = Console()

_STYLE = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.DEGRADED: "yellow",
    HealthStatus.UNHEALTHY: "bold red",
}


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting healthgate API server", style="bold green"))
    uvicorn.run(
        "healthgate.api.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def render_report(report: AggregatedReport, title: str) -> Table:
    table = Table(title=f"{title}: [{_STYLE[report.status]}]{report.status.value}[/]")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Description")
    for name, outcome in report.entries.items():
        table.add_row(
            name,
            f"[{_STYLE[outcome.status]}]{outcome.status.value}[/]",
            f"{outcome.duration_ms:.1f}ms",
            outcome.description or "",
        )
    table.caption = f"total {report.total_duration_ms:.1f}ms"
    return table


def run_check(tag: str | None, as_json: bool) -> int:
    """Run one query and print it. Returns the process exit code."""
    engine = HealthEngine(build_registry(settings), timeout=settings.probe_timeout_seconds)
    report = engine.query(has_tag(tag) if tag else match_all)

    if as_json:
        print(report_to_json(report, indent=2))
    else:
        console.print(render_report(report, tag or "all"))
    return 1 if report.status is HealthStatus.UNHEALTHY else 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="healthgate health check engine")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the API server")

    check_parser = sub.add_parser("check", help="Run probes once and print the report")
    check_parser.add_argument("--tag", help="Only run probes carrying this tag")
    check_parser.add_argument("--json", action="store_true", help="Print the wire JSON")

    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        sys.exit(run_check(args.tag, args.json))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
