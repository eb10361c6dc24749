from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

import typer

from models.records import MeasurementField

NO_DATA_MESSAGE = "No data available for selected range"
BAR_WIDTH = 40


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_label(timestamp: str) -> str:
    """Human-readable point label, e.g. ``Jan 1, 12:00 PM``."""
    parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    parsed = parsed.astimezone(timezone.utc)
    return f"{parsed:%b} {parsed.day}, {parsed:%I:%M %p}"


def _bar(value: float, lowest: float, highest: float) -> str:
    if highest == lowest:
        return "#" * BAR_WIDTH
    length = round((value - lowest) / (highest - lowest) * (BAR_WIDTH - 1)) + 1
    return "#" * length


def render_environment(environment: str, base_url: str) -> None:
    badge = "Local Development" if environment == "local" else "Production"
    colour = typer.colors.YELLOW if environment == "local" else typer.colors.GREEN
    typer.secho(f"[{badge}]", fg=colour, bold=True)
    typer.echo(f"API URL: {base_url}")


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Backend Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("message", payload.get("message")),
            ("database", payload.get("database")),
            ("version", payload.get("version")),
            ("timestamp", payload.get("timestamp")),
        ]
    )


def render_chart(rows: List[Dict[str, Any]], field: MeasurementField) -> None:
    echo_heading(field.display_name)
    if not rows:
        typer.echo(NO_DATA_MESSAGE)
        return

    values = [float(row.get(field.value) or 0) for row in rows]
    lowest, highest = min(values), max(values)
    labels = [format_label(row["timestamp"]) for row in rows]
    width = max(len(label) for label in labels)

    typer.echo(f"{'Time (UTC)':<{width}}  {field.display_name}")
    for label, value in zip(labels, values):
        typer.echo(f"{label:<{width}}  {value:>8.2f} {_bar(value, lowest, highest)}")


def render_metrics(metrics: Dict[str, Any]) -> None:
    def _fmt(key: str) -> str:
        value = metrics.get(key)
        return f"{value:.2f}" if isinstance(value, (int, float)) else "0.00"

    echo_heading("Metrics")
    echo_key_values(
        [
            ("avg", _fmt("avg")),
            ("min", _fmt("min")),
            ("max", _fmt("max")),
            ("stdDev", _fmt("stdDev")),
            ("count", metrics.get("count") or 0),
        ]
    )
