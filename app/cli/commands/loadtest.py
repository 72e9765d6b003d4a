"""Load test commands."""

import asyncio
from typing import Annotated, Optional

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from app.cli.client import APIError, get_client
from app.cli.output import console, print_error, print_info, print_load_test_report, print_warning

app = typer.Typer(help="Load test commands")

# Literal maxima the QA dashboard always sends; the engine re-clamps them
MAX_LOAD_TOTAL_REQUESTS = 1000
MAX_LOAD_CONCURRENT_REQUESTS = 50


def _requested_counts(
    total: int | None, concurrency: int | None, max_load: bool
) -> tuple[int | None, int | None]:
    if max_load:
        if total is not None or concurrency is not None:
            print_warning("--max-load overrides --total and --concurrency")
        return MAX_LOAD_TOTAL_REQUESTS, MAX_LOAD_CONCURRENT_REQUESTS
    return total, concurrency


def _run_local(url: str, total: int | None, concurrency: int | None) -> dict:
    """Run the engine in-process with a progress bar."""
    from app.services.load_test_service import LoadTestService

    service = LoadTestService()

    with Progress(
        TextColumn("[bold blue]Running load test"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("load-test", total=None)

        def on_batch(completed: int, total_requests: int) -> None:
            progress.update(task_id, completed=completed, total=total_requests)

        report = asyncio.run(
            service.run_load_test(
                url,
                total_requests=total,
                concurrent_requests=concurrency,
                progress_callback=on_batch,
            )
        )

    return report.model_dump(by_alias=True)


@app.command("run")
def run(
    url: Annotated[str, typer.Argument(help="Target URL requested with GET")],
    total: Annotated[
        Optional[int],
        typer.Option("--total", "-n", help="Total requests (default 100, capped at 500)"),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", help="Concurrent requests (default 10, capped at 25)"),
    ] = None,
    max_load: Annotated[
        bool,
        typer.Option("--max-load", help="Request the maximum load (1000 / 50 before clamping)"),
    ] = False,
    local: Annotated[
        bool,
        typer.Option("--local", help="Run the engine in this process instead of via the API"),
    ] = False,
) -> None:
    """
    Run a load test against URL and print its report.

    Requests are sent in sequential batches; every request of a batch finishes
    before the next batch starts.
    """
    total, concurrency = _requested_counts(total, concurrency, max_load)

    if local:
        from app.core.exceptions import InvalidInputError

        try:
            data = _run_local(url, total, concurrency)
        except InvalidInputError as e:
            print_error(f"Load test rejected: {e.message}")
            raise typer.Exit(1)
    else:
        client = get_client()
        try:
            with console.status("Running load test..."):
                data = client.run_load_test(
                    url, total_requests=total, concurrent_requests=concurrency
                )
        except APIError as e:
            print_error(f"Load test failed: {e.message}", e.details)
            raise typer.Exit(1)
        except Exception as e:
            print_error(f"Connection failed: {str(e)}")
            raise typer.Exit(1)

    print_load_test_report(data, url=url)


@app.command("plan")
def plan(
    total: Annotated[
        Optional[int],
        typer.Option("--total", "-n", help="Total requests (default 100, capped at 500)"),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", help="Concurrent requests (default 10, capped at 25)"),
    ] = None,
    max_load: Annotated[
        bool,
        typer.Option("--max-load", help="Plan the maximum load (1000 / 50 before clamping)"),
    ] = False,
) -> None:
    """
    Show the effective totals and batch layout a load test would use.

    No requests are sent.
    """
    from app.core.exceptions import InvalidInputError
    from app.services.load_test_service import LoadTestService

    total, concurrency = _requested_counts(total, concurrency, max_load)

    try:
        effective_total, effective_concurrency = LoadTestService().resolve_limits(
            "plan", total, concurrency
        )
    except InvalidInputError as e:
        print_error(f"Load test would be rejected: {e.message}")
        raise typer.Exit(1)

    full_batches, remainder = divmod(effective_total, effective_concurrency)
    batches = full_batches + (1 if remainder else 0)

    console.print(f"Effective total requests:      {effective_total}")
    console.print(f"Effective concurrent requests: {effective_concurrency}")
    console.print(f"Batches:                       {batches}")
    if remainder:
        print_info(f"Last batch sends {remainder} request(s)")
