"""CLI entry point for the Load Test Service."""

import os
from typing import Annotated, Optional

import typer
from rich.console import Console

from app.cli.commands import config, health, loadtest, metrics

# Version from pyproject.toml
__version__ = "1.0.0"

# Create main app
app = typer.Typer(
    name="load-tester",
    help="Load Test Service CLI - Run HTTP load tests and inspect the service",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register sub-commands
app.add_typer(loadtest.app, name="test", help="Run and plan load tests")
app.add_typer(health.app, name="health", help="Health check commands")
app.add_typer(metrics.app, name="metrics", help="Service metrics")
app.add_typer(config.app, name="config", help="Configuration management")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"load-tester version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    api_url: Annotated[
        Optional[str],
        typer.Option("--api-url", "-u", envvar="LOAD_TESTER_API_URL", help="API URL"),
    ] = None,
    token: Annotated[
        Optional[str],
        typer.Option("--token", "-t", envvar="LOAD_TESTER_API_TOKEN", help="Bearer token"),
    ] = None,
    output_format: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Output format (table, json)"),
    ] = None,
) -> None:
    """
    Load Test Service CLI.

    Run bounded-concurrency HTTP load tests, check service health and view metrics.

    [bold]Quick Start:[/bold]

        # Run a load test through the API
        load-tester test run https://example.com -n 200 -c 20

        # Run the engine locally without the API
        load-tester test run https://example.com --local

        # Show how a request would be clamped and batched
        load-tester test plan --max-load

        # Check service health
        load-tester health

    [bold]Environment Variables:[/bold]

        LOAD_TESTER_API_URL     - API URL
        LOAD_TESTER_API_TOKEN   - Bearer token
        LOAD_TESTER_API_TIMEOUT - Request timeout (seconds)
    """
    # Override config with CLI options
    if api_url:
        os.environ["LOAD_TESTER_API_URL"] = api_url
    if token:
        os.environ["LOAD_TESTER_API_TOKEN"] = token
    if output_format:
        os.environ["LOAD_TESTER_OUTPUT_FORMAT"] = output_format

    # Reset cached config and client
    from app.cli.client import reset_client
    from app.cli.config import reset_config_cache

    reset_config_cache()
    reset_client()


if __name__ == "__main__":
    app()
