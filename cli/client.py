from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the measurement analytics API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def probe_health(self) -> Optional[Dict[str, Any]]:
        """Return the health payload, or None when the backend is unusable."""
        try:
            response = self._client.get("/health")
            response.raise_for_status()
        except httpx.HTTPError:
            return None
        return response.json()

    def list_measurements(self, field: str, start: date, end: date) -> List[Dict[str, Any]]:
        return self._get("/measurements", self._range_params(field, start, end))

    def get_metrics(self, field: str, start: date, end: date) -> Dict[str, Any]:
        return self._get("/measurements/metrics", self._range_params(field, start, end))

    def seed(self) -> Dict[str, Any]:
        try:
            response = self._client.post(
                "/measurements/seed", headers={"Accept": "application/json"}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            self._handle_network_error(exc)
        return response.json()

    def _get(self, path: str, params: Dict[str, str]) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            self._handle_network_error(exc)
        return response.json()

    @staticmethod
    def _range_params(field: str, start: date, end: date) -> Dict[str, str]:
        return {
            "field": field,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail") or data.get("message") or data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    def _handle_network_error(self, exc: httpx.RequestError) -> None:
        typer.secho(
            f"Cannot reach {self._config.base_url}: {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
