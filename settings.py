from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
from urllib.parse import urlsplit

from dotenv import find_dotenv, load_dotenv


_MONGO_URI_ENV = "MONGO_URI"
_COLLECTION_ENV = "MEASUREMENTS_COLLECTION"
_MONGO_TIMEOUT_ENV = "MONGO_SERVER_SELECTION_TIMEOUT_MS"
_BACKEND_ENV = "MEASUREMENT_STORE_BACKEND"
_MEMORY_PATH_ENV = "MEMORY_STORE_PATH"
_AUTO_SEED_ENV = "AUTO_SEED"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_API_BASE_URL_ENV = "DASHBOARD_API_BASE_URL"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"

DEFAULT_MONGO_URI = "mongodb://localhost:27017/analytics"
DEFAULT_PORT = 2002
LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})
SUPPORTED_BACKENDS = ("mongo", "memory")


@dataclass(frozen=True)
class Settings:
    mongo_uri: str
    collection_name: str
    mongo_timeout_ms: int
    store_backend: str
    memory_store_path: Optional[str]
    auto_seed: bool
    host: str
    port: int
    dashboard_api_base_url: Optional[str]
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in {"1", "true", "yes", "on"}:
        return True
    if candidate in {"0", "false", "no", "off"}:
        return False
    return default


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_BACKEND_ENV, default).lower()
    return candidate if candidate in SUPPORTED_BACKENDS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())
    return origins or default


def load_environment_file(path: Optional[str] = None) -> bool:
    """Merge a ``.env`` file into the process environment.

    Variables already set in the environment keep their values. Without an
    explicit path the file is searched for from the working directory upwards.
    """
    return load_dotenv(path or find_dotenv(usecwd=True), override=False)


@lru_cache
def get_settings() -> Settings:
    load_environment_file()
    return Settings(
        mongo_uri=_read_str_env(_MONGO_URI_ENV, DEFAULT_MONGO_URI),
        collection_name=_read_str_env(_COLLECTION_ENV, "measurements"),
        mongo_timeout_ms=_read_positive_int(_MONGO_TIMEOUT_ENV, 5000),
        store_backend=_read_backend("mongo"),
        memory_store_path=_read_optional_env(_MEMORY_PATH_ENV, None),
        auto_seed=_read_bool(_AUTO_SEED_ENV, True),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, DEFAULT_PORT),
        dashboard_api_base_url=_read_optional_env(_API_BASE_URL_ENV, None),
        cors_origins=_read_origins(("*",)),
        log_level=_read_log_level("INFO"),
    )


def is_local_origin(origin: str) -> bool:
    """Return True when the origin points at the developer's own machine."""
    host = urlsplit(origin).hostname or ""
    return host in LOCAL_HOSTS


def resolve_api_base_url(
    origin: str,
    configured: Optional[str] = None,
    local_port: int = DEFAULT_PORT,
) -> str:
    """Pick the API base address a dashboard served from ``origin`` should call.

    An explicitly configured address always wins. Without one, local origins
    talk to the development server port and anything else uses the same
    origin's ``/api`` path.
    """
    if configured:
        return configured.rstrip("/")
    if is_local_origin(origin):
        return f"http://localhost:{local_port}/api"
    return f"{origin.rstrip('/')}/api"
