from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:2002/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SEED_DELAY = 1.0

_BASE_URL_ENV = "API_BASE_URL"
_TIMEOUT_ENV = "CLI_TIMEOUT"
_SEED_DELAY_ENV = "CLI_SEED_DELAY"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    seed_delay: float = DEFAULT_SEED_DELAY


def _read_float(value: Optional[str], default: float, allow_zero: bool = False) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    seed_delay: Optional[float] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if timeout is None:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    if seed_delay is None:
        seed_delay = _read_float(os.getenv(_SEED_DELAY_ENV), DEFAULT_SEED_DELAY, allow_zero=True)
    return CLIConfig(
        base_url=url.rstrip("/"),
        timeout=timeout,
        seed_delay=seed_delay,
    )
