"""Output formatting utilities for CLI."""

import json
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from app.cli.config import get_config

console = Console()
error_console = Console(stderr=True)


def format_timestamp(ts: str | datetime | None) -> str:
    """Format a timestamp for display."""
    if ts is None:
        return "-"
    if isinstance(ts, str):
        try:
            ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        except ValueError:
            return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def format_status(status: str) -> Text:
    """Format status with color."""
    colors = {
        "healthy": "green",
        "unhealthy": "red",
        "ready": "green",
        "not_ready": "red",
        "alive": "green",
    }
    color = colors.get(status.lower(), "white")
    return Text(status, style=color)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, default=str, indent=2))


def print_error(message: str, details: dict | None = None) -> None:
    """Print an error message."""
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    if details:
        for key, value in details.items():
            error_console.print(f"  [dim]{key}:[/dim] {value}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_health_status(data: dict, title: str = "Health Status") -> None:
    """Print health status in a formatted panel."""
    config = get_config()
    if config.output_format == "json":
        print_json(data)
        return

    status = data.get("status", "unknown")

    panel_content = Text()
    panel_content.append("Status: ")
    panel_content.append(format_status(status))

    if "timestamp" in data:
        panel_content.append(f"\nTimestamp: {format_timestamp(data['timestamp'])}")

    if "environment" in data:
        panel_content.append(f"\nEnvironment: {data['environment']}")

    console.print(
        Panel(
            panel_content,
            title=title,
            border_style="green" if status in ("healthy", "ready", "alive") else "red",
        )
    )

    engine = data.get("engine")
    if engine:
        table = Table(title="Engine Limits", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", justify="right")
        for name, value in engine.items():
            table.add_row(name.replace("_", " "), str(value))
        console.print(table)

    checks = data.get("checks")
    if checks:
        table = Table(title="Checks", show_header=True)
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        for name, check_status in checks.items():
            table.add_row(name, format_status(str(check_status)))
        console.print(table)


def print_load_test_report(data: dict, url: str | None = None) -> None:
    """Print a load test report the way the QA dashboard lays it out."""
    config = get_config()
    if config.output_format == "json":
        print_json(data)
        return

    total = data.get("totalRequests", 0)
    successful = data.get("successfulRequests", 0)
    failed = data.get("failedRequests", 0)
    success_rate = successful / total * 100 if total else 0.0

    title = f"Load Test Results - {escape(url)}" if url else "Load Test Results"
    table = Table(title=title, show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Requests", str(total))
    table.add_row("Successful", Text(str(successful), style="green"))
    table.add_row("Failed", Text(str(failed), style="red" if failed else "white"))
    table.add_row("Success Rate", f"{success_rate:.1f}%")
    table.add_row("Avg Response Time", f"{data.get('averageResponseTime', 0):.0f}ms")
    table.add_row(
        "Min / Max",
        f"{data.get('minResponseTime', 0)}ms / {data.get('maxResponseTime', 0)}ms",
    )
    table.add_row("Req/sec", f"{data.get('requestsPerSecond', 0):.2f}")

    console.print(table)

    errors = data.get("errors") or []
    if errors:
        console.print(
            Panel(Text("\n".join(errors)), title=f"Errors (first {len(errors)})", border_style="red")
        )


def print_metrics_summary(metrics_text: str) -> None:
    """Print a summary of Prometheus metrics."""
    config = get_config()
    if config.output_format == "json":
        metrics = {}
        for line in metrics_text.split("\n"):
            if line and not line.startswith("#"):
                parts = line.split(" ")
                if len(parts) >= 2:
                    metrics[parts[0]] = parts[1]
        print_json(metrics)
        return

    table = Table(title="Key Metrics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    key_metrics = [
        "load_tests_total",
        "load_tests_in_progress",
        "load_test_requests_total",
        "load_test_duration_seconds_sum",
        "rate_limit_exceeded_total",
        "http_requests_total",
    ]

    metric_lines = [line for line in metrics_text.split("\n") if line and not line.startswith("#")]
    for line in metric_lines:
        for metric in key_metrics:
            if line.startswith(metric):
                parts = line.split(" ")
                if len(parts) >= 2:
                    table.add_row(parts[0][:60], parts[1])
                break

    console.print(table)
    console.print(f"\n[dim]Total metrics lines: {len(metric_lines)}[/dim]")
