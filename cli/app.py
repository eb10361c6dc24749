from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, timedelta
from typing import NoReturn, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_chart, render_environment, render_health, render_metrics
from models.records import MeasurementField
from settings import is_local_origin

DEFAULT_RANGE_DAYS = 7


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Terminal dashboard for the measurement analytics service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def default_date_range(today: Optional[date] = None) -> tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=DEFAULT_RANGE_DAYS), end


def _parse_day(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{name} must be a YYYY-MM-DD date.") from exc


def _warn(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1)


def fetch_cycle(
    client: ApiClient, field: MeasurementField, start: Optional[date], end: Optional[date]
) -> None:
    """Validate the range locally, then load and render series plus metrics."""
    if start is None or end is None:
        _warn("Please select both start and end dates")
    if start > end:
        _warn("Start date cannot be after end date")

    rows = client.list_measurements(field.value, start, end)
    metrics = client.get_metrics(field.value, start, end)

    render_chart(rows, field)
    typer.echo()
    render_metrics(metrics)
    typer.secho(
        f"Loaded {len(rows)} data points for {field.value}", fg=typer.colors.GREEN
    )


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="API base URL (defaults to API_BASE_URL env or http://localhost:2002/api).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Show backend and database status."""
    state = _get_state(ctx)
    payload = state.client.probe_health()
    if payload is None:
        typer.secho(
            f"Cannot connect to {state.config.base_url}", fg=typer.colors.RED, err=True
        )
        raise typer.Exit(code=1)
    render_health(payload)


@app.command("load")
def load_command(
    ctx: typer.Context,
    field: MeasurementField = typer.Option(
        MeasurementField.temperature, "--field", "-f", help="Measurement to chart."
    ),
    start: Optional[str] = typer.Option(None, "--start", help="First day, YYYY-MM-DD."),
    end: Optional[str] = typer.Option(None, "--end", help="Last day, YYYY-MM-DD."),
) -> None:
    """Chart one field and print its metrics (defaults to the last 7 days)."""
    state = _get_state(ctx)
    start_day = _parse_day(start, "--start")
    end_day = _parse_day(end, "--end")
    if start_day is None and end_day is None:
        start_day, end_day = default_date_range()
    fetch_cycle(state.client, field, start_day, end_day)


@app.command("seed")
def seed_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    field: MeasurementField = typer.Option(
        MeasurementField.temperature, "--field", "-f", help="Measurement to chart afterwards."
    ),
    delay: Optional[float] = typer.Option(
        None, "--delay", help="Seconds to wait before reloading data."
    ),
) -> None:
    """Generate 30 days of test data, then reload the last 7 days."""
    state = _get_state(ctx)
    if not yes and not typer.confirm(
        "This will generate test data for the last 30 days. Continue?"
    ):
        raise typer.Abort()

    result = state.client.seed()
    typer.secho(str(result.get("message")), fg=typer.colors.GREEN)

    wait = state.config.seed_delay if delay is None else delay
    if wait > 0:
        time.sleep(wait)
    start_day, end_day = default_date_range()
    fetch_cycle(state.client, field, start_day, end_day)


@app.command("dashboard")
def dashboard_command(
    ctx: typer.Context,
    field: MeasurementField = typer.Option(
        MeasurementField.temperature, "--field", "-f", help="Measurement to chart."
    ),
) -> None:
    """Show environment, probe health and load the last 7 days when healthy."""
    state = _get_state(ctx)
    environment = "local" if is_local_origin(state.config.base_url) else "production"
    render_environment(environment, state.config.base_url)

    start_day, end_day = default_date_range()
    payload = state.client.probe_health()
    if payload is None:
        typer.secho("Backend: cannot connect", fg=typer.colors.RED)
        return
    typer.secho(f"Backend: connected ({payload.get('database')})", fg=typer.colors.GREEN)
    typer.echo()
    fetch_cycle(state.client, field, start_day, end_day)
