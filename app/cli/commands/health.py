"""Health check commands."""

import typer

from app.cli.client import APIError, get_client
from app.cli.output import print_error, print_health_status

app = typer.Typer(help="Health check commands")

HEALTHY_STATUSES = ("healthy", "ready", "alive")


@app.callback(invoke_without_command=True)
def health(
    ctx: typer.Context,
    live: bool = typer.Option(False, "--live", "-l", help="Check liveness only"),
    ready: bool = typer.Option(False, "--ready", "-r", help="Check readiness only"),
) -> None:
    """
    Check the Load Test Service health.

    Without flags, returns full health status including the engine limits.
    Exits with code 1 when the service is unhealthy or unreachable.
    """
    if ctx.invoked_subcommand is not None:
        return

    client = get_client()

    try:
        if live:
            data, title = client.health_live(), "Liveness Check"
        elif ready:
            data, title = client.health_ready(), "Readiness Check"
        else:
            data, title = client.health(), "Health Status"
    except APIError as e:
        print_error(f"Health check failed: {e.message}", e.details)
        raise typer.Exit(1)
    except Exception as e:
        print_error(f"Connection failed: {str(e)}")
        raise typer.Exit(1)

    print_health_status(data, title=title)

    if data.get("status", "unknown").lower() not in HEALTHY_STATUSES:
        raise typer.Exit(1)
